"""
Daily price model - one OHLCV row per (symbol, trading date).
"""
from datetime import date
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel


class DailyPricePoint(BaseModel):
    """Daily price point data model"""
    symbol: str
    trade_date: date
    open: Decimal = Decimal("0")
    high: Decimal = Decimal("0")
    low: Decimal = Decimal("0")
    close: Decimal = Decimal("0")
    volume: int = 0
    adj_close: Optional[Decimal] = None

    class Config:
        from_attributes = True

    @property
    def key(self):
        """Natural key used for upserts"""
        return (self.symbol, self.trade_date)
