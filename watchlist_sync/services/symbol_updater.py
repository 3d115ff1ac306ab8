"""
Symbol updater - fetch one symbol's quote and trailing history and persist them.

Failure policy per step:
    quote       fatal for the symbol, nothing is written
    historical  logged and replaced by an empty history
    security    fatal for the symbol
    price point logged and skipped, remaining points still written
"""
import asyncio
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, List, Optional

from watchlist_sync.config import Config
from watchlist_sync.errors import (
    HistoricalFetchFailed,
    HistoricalFetchTimeout,
    PersistenceError,
    QuoteFetchFailed,
    QuoteFetchTimeout,
)
from watchlist_sync.models.daily_price import DailyPricePoint
from watchlist_sync.models.quote import HistoricalBar, QuoteSnapshot
from watchlist_sync.models.results import SyncedQuote, UpdateResult
from watchlist_sync.models.security import Security
from watchlist_sync.providers.base import MarketDataProvider
from watchlist_sync.sync.rate_limiter import RateLimiter
from watchlist_sync.sync.response_cache import ResponseCache, history_key, quote_key
from watchlist_sync.utils.logger import get_logger
from watchlist_sync.utils.symbols import exchange_for, to_provider_symbol, to_storage_symbol

ZERO = Decimal("0")


class _Admission:
    """Acquires the rate-limit slot for one update, at most once."""

    def __init__(self, rate_limiter: RateLimiter, key: str):
        self.rate_limiter = rate_limiter
        self.key = key
        self.granted = False

    async def ensure(self):
        if not self.granted:
            await self.rate_limiter.acquire(self.key)
            self.granted = True


class SymbolUpdater:
    """Unit of work for one symbol: rate limit, fetch, map, persist."""

    def __init__(
        self,
        provider: MarketDataProvider,
        security_repo,
        price_repo,
        rate_limiter: RateLimiter,
        cache: ResponseCache,
        config: Config,
        today: Optional[Callable[[], date]] = None,
    ):
        """
        Args:
            provider: Market data provider adapter
            security_repo: Store for Security rows (SecurityRepository)
            price_repo: Store for DailyPricePoint rows (PriceRepository)
            rate_limiter: Shared rate limiter
            cache: Shared response cache
            config: Configuration
            today: Date source for the history window (injectable for tests)
        """
        self.provider = provider
        self.security_repo = security_repo
        self.price_repo = price_repo
        self.rate_limiter = rate_limiter
        self.cache = cache
        self.config = config
        self.today = today or date.today
        self.logger = get_logger(__name__)

    async def update(self, symbol: str) -> UpdateResult:
        """
        Synchronize one symbol.

        Raises:
            ValidationError: if the symbol is missing or malformed (before any
                rate-limit or network activity)

        Returns:
            UpdateResult carrying either a SyncedQuote or the error
        """
        settings = self.config.provider
        storage_symbol = to_storage_symbol(symbol, settings.default_suffix)
        provider_symbol = to_provider_symbol(storage_symbol, settings.default_suffix)
        admission = _Admission(self.rate_limiter, storage_symbol)

        try:
            quote = await self._get_quote(provider_symbol, admission)
        except QuoteFetchFailed as exc:
            self.logger.error("Error updating %s: %s", storage_symbol, exc)
            return UpdateResult.failed(storage_symbol, exc)

        history_error = None
        try:
            bars = await self._get_history(provider_symbol, admission)
        except HistoricalFetchFailed as exc:
            self.logger.warning("Historical data fetch failed for %s: %s", storage_symbol, exc)
            history_error = str(exc)
            bars = []

        try:
            security = await self.security_repo.upsert(
                self._to_security(storage_symbol, provider_symbol, quote)
            )
        except PersistenceError as exc:
            self.logger.error("Error storing security %s: %s", storage_symbol, exc)
            return UpdateResult.failed(storage_symbol, exc)

        written = await self._store_history(storage_symbol, bars)
        self.logger.info(
            "Updated %s: price=%s, %s/%s price points stored",
            storage_symbol, quote.regular_market_price, written, len(bars),
        )

        summary = self._summarize(security, quote, written)
        summary.history_error = history_error
        return UpdateResult.ok(storage_symbol, summary)

    # ----------------- provider steps ----------------- #

    async def _get_quote(self, provider_symbol: str, admission: _Admission) -> QuoteSnapshot:
        key = quote_key(provider_symbol)
        cached = self.cache.get(key)
        if cached is not None:
            self.logger.info("Serving cached quote for %s", provider_symbol)
            return cached

        await admission.ensure()
        timeout = self.config.provider.quote_timeout_seconds
        try:
            quote = await asyncio.wait_for(self.provider.fetch_quote(provider_symbol), timeout)
        except asyncio.TimeoutError as exc:
            raise QuoteFetchTimeout(
                f"Quote request timed out after {timeout}s", provider_symbol
            ) from exc
        except Exception as exc:
            raise QuoteFetchFailed(str(exc), provider_symbol) from exc

        self.cache.put(key, quote)
        return quote

    async def _get_history(self, provider_symbol: str, admission: _Admission) -> List[HistoricalBar]:
        settings = self.config.provider
        end_date = self.today()
        start_date = end_date - timedelta(days=settings.history_days)

        key = history_key(provider_symbol, start_date, end_date, settings.interval)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        await admission.ensure()
        timeout = settings.historical_timeout_seconds
        try:
            bars = await asyncio.wait_for(
                self.provider.fetch_historical(provider_symbol, start_date, end_date, settings.interval),
                timeout,
            )
        except asyncio.TimeoutError as exc:
            raise HistoricalFetchTimeout(
                f"Historical data timed out after {timeout}s", provider_symbol
            ) from exc
        except Exception as exc:
            raise HistoricalFetchFailed(str(exc), provider_symbol) from exc

        bars = list(bars or [])
        self.cache.put(key, bars)
        return bars

    # ----------------- mapping and persistence ----------------- #

    def _to_security(self, storage_symbol: str, provider_symbol: str, quote: QuoteSnapshot) -> Security:
        settings = self.config.provider
        return Security(
            symbol=storage_symbol,
            name=quote.long_name or quote.short_name or storage_symbol,
            sector=quote.sector,
            industry=quote.industry,
            market_cap=quote.market_cap,
            currency=quote.currency or settings.default_currency,
            exchange=exchange_for(provider_symbol, settings.exchange_suffixes) or quote.exchange,
        )

    async def _store_history(self, storage_symbol: str, bars: List[HistoricalBar]) -> int:
        written = 0
        for bar in bars:
            if bar.trade_date is None:
                continue

            point = DailyPricePoint(
                symbol=storage_symbol,
                trade_date=bar.trade_date,
                open=bar.open if bar.open is not None else ZERO,
                high=bar.high if bar.high is not None else ZERO,
                low=bar.low if bar.low is not None else ZERO,
                close=bar.close if bar.close is not None else ZERO,
                volume=bar.volume or 0,
                adj_close=bar.adj_close,
            )
            try:
                await self.price_repo.upsert(point)
                written += 1
            except PersistenceError as exc:
                self.logger.warning(
                    "Error storing price point for %s on %s: %s",
                    storage_symbol, bar.trade_date, exc,
                )
        return written

    @staticmethod
    def _summarize(security: Security, quote: QuoteSnapshot, written: int) -> SyncedQuote:
        current = quote.regular_market_price
        previous = quote.regular_market_previous_close

        change = (current or ZERO) - (previous or ZERO)
        change_percent = change / previous * 100 if previous else ZERO

        return SyncedQuote(
            security=security,
            current_price=current,
            previous_close=previous,
            change=change,
            change_percent=change_percent,
            volume=quote.regular_market_volume,
            day_high=quote.regular_market_day_high,
            day_low=quote.regular_market_day_low,
            week52_high=quote.fifty_two_week_high,
            week52_low=quote.fifty_two_week_low,
            history_points_written=written,
        )
