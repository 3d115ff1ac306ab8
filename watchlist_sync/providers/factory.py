"""
Provider selection from configuration.
"""
from watchlist_sync.config import Config
from watchlist_sync.providers.base import MarketDataProvider


def create_provider(config: Config) -> MarketDataProvider:
    """
    Build the adapter named by config.provider.name.

    Imports are deferred so only the selected SDK has to be importable.
    """
    name = config.provider.name.lower()
    if name == "yfinance":
        from watchlist_sync.providers.yfinance_provider import YFinanceProvider
        return YFinanceProvider(config)
    if name == "massive":
        from watchlist_sync.providers.massive_provider import MassiveProvider
        return MassiveProvider(config)
    raise ValueError(f"Unsupported provider: {config.provider.name}")
