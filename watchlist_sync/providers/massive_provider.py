"""
Massive (Polygon.io) adapter (massive.RESTClient -> MarketDataProvider).
Suited to US tickers; configure an empty provider.default_suffix with it.
"""
import asyncio
from datetime import date, datetime, timezone
from typing import List, Optional

from massive import RESTClient

from watchlist_sync.config import Config
from watchlist_sync.errors import ProviderError
from watchlist_sync.models.quote import HistoricalBar, QuoteSnapshot, SymbolMatch
from watchlist_sync.providers.base import MarketDataProvider, to_decimal, to_int
from watchlist_sync.utils.logger import get_logger


class MassiveProvider(MarketDataProvider):
    """
    Wrapper around Massive RESTClient mapping snapshots, ticker details and
    aggregates into provider-agnostic models.
    """

    name = "massive"

    def __init__(self, config: Config, client: Optional[RESTClient] = None):
        """
        Args:
            config: Configuration object
            client: Pre-built RESTClient (tests); built from config otherwise
        """
        self.config = config
        self.logger = get_logger(__name__)
        self.client = client or RESTClient(
            api_key=config.massive_api_key,
            base=config.massive.base_url.rstrip("/"),
        )

    def _interval_to_multiplier_timespan(self, interval: str) -> tuple:
        """
        Convert an interval ('1d', '1wk', '1h', ...) to Massive's multiplier/timespan.
        """
        mapping = {
            '1m': (1, 'minute'),
            '5m': (5, 'minute'),
            '15m': (15, 'minute'),
            '1h': (1, 'hour'),
            '1d': (1, 'day'),
            '1wk': (1, 'week'),
            '1mo': (1, 'month'),
        }

        if interval not in mapping:
            raise ProviderError(f"Unsupported interval: {interval}")

        return mapping[interval]

    async def fetch_quote(self, symbol: str) -> QuoteSnapshot:
        try:
            snapshot, details = await asyncio.gather(
                asyncio.to_thread(self.client.get_snapshot_ticker, "stocks", symbol),
                asyncio.to_thread(self.client.get_ticker_details, symbol),
            )
        except Exception as exc:
            raise ProviderError(f"Quote request failed for {symbol}: {exc}", symbol) from exc

        day = getattr(snapshot, "day", None)
        prev_day = getattr(snapshot, "prev_day", None)
        last_trade = getattr(snapshot, "last_trade", None)

        price = getattr(last_trade, "price", None) or getattr(day, "close", None)
        if price is None:
            raise ProviderError(f"No quote data available for symbol: {symbol!r}", symbol)

        currency = getattr(details, "currency_name", None)
        return QuoteSnapshot(
            symbol=symbol,
            long_name=getattr(details, "name", None),
            sector=getattr(details, "sic_description", None),
            market_cap=to_decimal(getattr(details, "market_cap", None)),
            currency=currency.upper() if currency else None,
            exchange=getattr(details, "primary_exchange", None),
            regular_market_price=to_decimal(price),
            regular_market_previous_close=to_decimal(getattr(prev_day, "close", None)),
            regular_market_volume=to_int(getattr(day, "volume", None)),
            regular_market_day_high=to_decimal(getattr(day, "high", None)),
            regular_market_day_low=to_decimal(getattr(day, "low", None)),
        )

    async def fetch_historical(
        self,
        symbol: str,
        start_date: date,
        end_date: date,
        interval: str = "1d",
    ) -> List[HistoricalBar]:
        multiplier, timespan = self._interval_to_multiplier_timespan(interval)
        try:
            aggs = await asyncio.to_thread(
                lambda: list(self.client.list_aggs(
                    ticker=symbol,
                    multiplier=multiplier,
                    timespan=timespan,
                    from_=start_date.isoformat(),
                    to=end_date.isoformat(),
                    limit=50000,
                ))
            )
        except Exception as exc:
            raise ProviderError(f"Historical request failed for {symbol}: {exc}", symbol) from exc

        bars = []
        for agg in aggs:
            # Massive timestamps are epoch milliseconds
            trade_date = (
                datetime.fromtimestamp(agg.timestamp / 1000, tz=timezone.utc).date()
                if agg.timestamp is not None else None
            )
            bars.append(HistoricalBar(
                trade_date=trade_date,
                open=to_decimal(agg.open),
                high=to_decimal(agg.high),
                low=to_decimal(agg.low),
                close=to_decimal(agg.close),
                volume=to_int(agg.volume),
            ))

        self.logger.debug("Fetched %s aggregates for %s", len(bars), symbol)
        return bars

    async def search_symbols(self, query: str, limit: int = 10) -> List[SymbolMatch]:
        def _search():
            results = []
            for item in self.client.list_tickers(
                search=query,
                market="stocks",
                active=True,
                limit=limit,
            ):
                results.append(item)
                if len(results) >= limit:
                    break
            return results

        try:
            tickers = await asyncio.to_thread(_search)
        except Exception as exc:
            raise ProviderError(f"Symbol search failed for {query!r}: {exc}") from exc

        matches = []
        for item in tickers:
            ticker = (item.ticker or "").upper()
            if not ticker:
                continue
            matches.append(SymbolMatch(
                symbol=ticker,
                full_symbol=ticker,
                name=item.name or ticker,
                exchange=getattr(item, "primary_exchange", None),
                type=getattr(item, "type", None) or "EQUITY",
            ))
        return matches
