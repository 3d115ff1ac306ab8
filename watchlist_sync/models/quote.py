"""
Provider-facing models: quote snapshots, historical bars and search matches.
Adapters map their SDK payloads into these before anything else sees them.
"""
from datetime import date
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel


class QuoteSnapshot(BaseModel):
    """Current quote plus descriptive fields for one provider symbol"""
    symbol: str
    long_name: Optional[str] = None
    short_name: Optional[str] = None
    sector: Optional[str] = None
    industry: Optional[str] = None
    market_cap: Optional[Decimal] = None
    currency: Optional[str] = None
    exchange: Optional[str] = None
    regular_market_price: Optional[Decimal] = None
    regular_market_previous_close: Optional[Decimal] = None
    regular_market_volume: Optional[int] = None
    regular_market_day_high: Optional[Decimal] = None
    regular_market_day_low: Optional[Decimal] = None
    fifty_two_week_high: Optional[Decimal] = None
    fifty_two_week_low: Optional[Decimal] = None


class HistoricalBar(BaseModel):
    """One bar of a historical range; values may be missing on thin days"""
    trade_date: Optional[date] = None
    open: Optional[Decimal] = None
    high: Optional[Decimal] = None
    low: Optional[Decimal] = None
    close: Optional[Decimal] = None
    volume: Optional[int] = None
    adj_close: Optional[Decimal] = None


class SymbolMatch(BaseModel):
    """Candidate returned by a symbol search"""
    symbol: str
    full_symbol: str
    name: str
    exchange: Optional[str] = None
    type: str = "EQUITY"
    score: float = 0.0
