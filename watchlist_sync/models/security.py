"""
Security model - represents a watched instrument.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel


class Security(BaseModel):
    """Security data model, keyed by its un-suffixed symbol"""
    symbol: str
    name: str
    sector: Optional[str] = None
    industry: Optional[str] = None
    market_cap: Optional[Decimal] = None
    currency: str = "INR"
    exchange: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True  # For Pydantic v2 ORM mode
