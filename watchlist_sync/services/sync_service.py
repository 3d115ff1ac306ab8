"""
Sync service - the operations every trigger (manual refresh, scheduled job,
on-demand request) calls. Triggers share one instance per process so they
also share the rate limiter and the response cache.
"""
from typing import Iterable, List, Optional

from watchlist_sync.config import Config
from watchlist_sync.models.results import BatchReport, UpdateResult
from watchlist_sync.providers.base import MarketDataProvider
from watchlist_sync.providers.factory import create_provider
from watchlist_sync.repositories.price_repository import PriceRepository
from watchlist_sync.repositories.security_repository import SecurityRepository
from watchlist_sync.services.batch_scheduler import BatchScheduler
from watchlist_sync.services.symbol_updater import SymbolUpdater
from watchlist_sync.sync.rate_limiter import RateLimiter, get_rate_limiter
from watchlist_sync.sync.response_cache import ResponseCache, get_response_cache
from watchlist_sync.utils.logger import get_logger
from watchlist_sync.utils.symbols import to_storage_symbol


class SyncService:
    """
    Entry point of the synchronization engine.
    Validates input, then delegates to SymbolUpdater and BatchScheduler.
    """

    def __init__(
        self,
        provider: MarketDataProvider,
        security_repo,
        price_repo,
        rate_limiter: RateLimiter,
        cache: ResponseCache,
        config: Config,
        updater: Optional[SymbolUpdater] = None,
    ):
        self.provider = provider
        self.security_repo = security_repo
        self.price_repo = price_repo
        self.config = config
        self.logger = get_logger(__name__)
        self.updater = updater or SymbolUpdater(
            provider=provider,
            security_repo=security_repo,
            price_repo=price_repo,
            rate_limiter=rate_limiter,
            cache=cache,
            config=config,
        )
        self.scheduler = BatchScheduler(self.updater.update)

    @classmethod
    def from_config(cls, config: Config) -> "SyncService":
        """Wire the configured provider, the repositories and the process-wide limiter/cache."""
        return cls(
            provider=create_provider(config),
            security_repo=SecurityRepository(config),
            price_repo=PriceRepository(config),
            rate_limiter=get_rate_limiter(config),
            cache=get_response_cache(config),
            config=config,
        )

    def normalize(self, symbols: Iterable[str]) -> List[str]:
        """
        Validate every symbol and return storage symbols, duplicates removed.

        Raises:
            ValidationError: on the first invalid symbol, before any work starts
        """
        suffix = self.config.provider.default_suffix
        normalized = [to_storage_symbol(symbol, suffix) for symbol in symbols]
        return list(dict.fromkeys(normalized))

    async def synchronize(
        self,
        symbols: Iterable[str],
        concurrency: Optional[int] = None,
    ) -> BatchReport:
        """
        Update many symbols under a concurrency bound.

        Args:
            symbols: Symbols to update (any case, with or without default suffix)
            concurrency: Max updates in flight; config sync.default_concurrency if None

        Returns:
            BatchReport partitioning the normalized symbols into succeeded/failed
        """
        storage_symbols = self.normalize(symbols)
        if concurrency is None:
            concurrency = self.config.sync.default_concurrency

        self.logger.info("Synchronizing %s symbols (concurrency=%s)", len(storage_symbols), concurrency)
        return await self.scheduler.run(storage_symbols, concurrency)

    async def synchronize_one(self, symbol: str) -> UpdateResult:
        """
        Update a single symbol.

        Raises:
            ValidationError: if the symbol is missing or malformed
        """
        return await self.updater.update(symbol)
