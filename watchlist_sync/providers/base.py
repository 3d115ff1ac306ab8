"""
Provider interface.

The engine depends only on MarketDataProvider; SDK-specific details
(yfinance, Massive) stay inside the adapters. Adapters raise ProviderError
for any failure and leave deadlines to the caller.
"""
import math
from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from watchlist_sync.models.quote import HistoricalBar, QuoteSnapshot, SymbolMatch


class MarketDataProvider(ABC):
    """Abstract market data capability"""

    name: str = "abstract"

    @abstractmethod
    async def fetch_quote(self, symbol: str) -> QuoteSnapshot:
        """Fetch the current quote for a provider symbol."""

    @abstractmethod
    async def fetch_historical(
        self,
        symbol: str,
        start_date: date,
        end_date: date,
        interval: str = "1d",
    ) -> List[HistoricalBar]:
        """Fetch bars between start_date and end_date (inclusive)."""

    @abstractmethod
    async def search_symbols(self, query: str, limit: int = 10) -> List[SymbolMatch]:
        """Search the provider's symbol universe."""


def to_decimal(value) -> Optional[Decimal]:
    """Convert SDK floats (possibly NaN/None) to Decimal."""
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    try:
        return Decimal(str(number))
    except InvalidOperation:
        return None


def to_int(value) -> Optional[int]:
    number = to_decimal(value)
    return int(number) if number is not None else None
