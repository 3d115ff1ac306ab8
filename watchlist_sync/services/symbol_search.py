"""
Symbol search - lookup flow used when adding securities to the watch list.
"""
from typing import List

from watchlist_sync.config import Config
from watchlist_sync.errors import ValidationError
from watchlist_sync.models.quote import SymbolMatch
from watchlist_sync.providers.base import MarketDataProvider
from watchlist_sync.sync.rate_limiter import RateLimiter
from watchlist_sync.utils.logger import get_logger
from watchlist_sync.utils.symbols import exchange_for, strip_suffix


class SymbolSearch:
    """Searches the provider and keeps matches listed on the configured exchanges."""

    def __init__(self, provider: MarketDataProvider, config: Config, rate_limiter: RateLimiter = None):
        self.provider = provider
        self.config = config
        # Lookups are throttled per query only, independent of the sync limiter
        self.rate_limiter = rate_limiter or RateLimiter(
            global_min_interval=0.0,
            per_key_min_interval=config.search.min_interval_seconds,
        )
        self.logger = get_logger(__name__)

    async def search(self, query: str) -> List[SymbolMatch]:
        """
        Raises:
            ValidationError: if the query is shorter than search.min_query_length
            ProviderError: if the provider lookup fails
        """
        settings = self.config.search
        query = (query or "").strip()
        if len(query) < settings.min_query_length:
            raise ValidationError(
                f"Query must be at least {settings.min_query_length} characters"
            )

        await self.rate_limiter.acquire(query.lower())
        candidates = await self.provider.search_symbols(query, limit=settings.max_results)

        suffixes = self.config.provider.exchange_suffixes
        matches = []
        for candidate in candidates:
            full_symbol = candidate.full_symbol.upper()
            exchange = exchange_for(full_symbol, suffixes)
            if suffixes and exchange is None:
                continue
            matches.append(SymbolMatch(
                symbol=strip_suffix(full_symbol, suffixes),
                full_symbol=full_symbol,
                name=candidate.name or full_symbol,
                exchange=exchange or candidate.exchange,
                type=candidate.type or "EQUITY",
                score=candidate.score,
            ))
            if len(matches) >= settings.max_results:
                break

        self.logger.info("Search %r returned %s matches", query, len(matches))
        return matches
