"""
Exception hierarchy for the synchronization engine.

ValidationError is raised to the caller before any rate-limit or network
activity. Provider and persistence errors are contained per symbol by the
updater and the batch scheduler.
"""
from typing import Optional


class WatchlistSyncError(Exception):
    """Base class for all watchlist sync errors"""


class ValidationError(WatchlistSyncError, ValueError):
    """Bad or missing caller input (symbol, concurrency, search query)"""


class ProviderError(WatchlistSyncError):
    """Network, timeout or provider-side failure"""

    step: Optional[str] = None

    def __init__(self, message: str, symbol: Optional[str] = None):
        super().__init__(message)
        self.symbol = symbol


class QuoteFetchFailed(ProviderError):
    """Quote fetch failed; fatal for the symbol being updated"""

    step = "quote"


class QuoteFetchTimeout(QuoteFetchFailed):
    """Quote fetch exceeded its deadline"""


class HistoricalFetchFailed(ProviderError):
    """Historical range fetch failed; suppressed into an empty history"""

    step = "historical"


class HistoricalFetchTimeout(HistoricalFetchFailed):
    """Historical range fetch exceeded its deadline"""


class PersistenceError(WatchlistSyncError):
    """Store write or read failure"""
