"""
Yahoo Finance adapter (yfinance -> MarketDataProvider).

yfinance is blocking, so every call runs in a worker thread. Note that
Ticker.history() treats `end` as exclusive.
"""
import asyncio
from datetime import date, timedelta
from typing import List

import yfinance as yf

from watchlist_sync.config import Config
from watchlist_sync.errors import ProviderError
from watchlist_sync.models.quote import HistoricalBar, QuoteSnapshot, SymbolMatch
from watchlist_sync.providers.base import MarketDataProvider, to_decimal, to_int
from watchlist_sync.utils.logger import get_logger


class YFinanceProvider(MarketDataProvider):
    """Fetches quotes, daily bars and symbol matches from Yahoo Finance."""

    name = "yfinance"

    def __init__(self, config: Config):
        self.config = config
        self.logger = get_logger(__name__)

    async def fetch_quote(self, symbol: str) -> QuoteSnapshot:
        try:
            info = await asyncio.to_thread(self._load_info, symbol)
        except Exception as exc:
            raise ProviderError(f"Quote request failed for {symbol}: {exc}", symbol) from exc

        price = info.get("regularMarketPrice") or info.get("currentPrice")
        if price is None:
            raise ProviderError(f"No quote data available for symbol: {symbol!r}", symbol)

        return QuoteSnapshot(
            symbol=symbol,
            long_name=info.get("longName"),
            short_name=info.get("shortName"),
            sector=info.get("sector"),
            industry=info.get("industry"),
            market_cap=to_decimal(info.get("marketCap")),
            currency=info.get("currency"),
            exchange=info.get("exchange"),
            regular_market_price=to_decimal(price),
            regular_market_previous_close=to_decimal(
                info.get("regularMarketPreviousClose") or info.get("previousClose")
            ),
            regular_market_volume=to_int(info.get("regularMarketVolume") or info.get("volume")),
            regular_market_day_high=to_decimal(info.get("regularMarketDayHigh") or info.get("dayHigh")),
            regular_market_day_low=to_decimal(info.get("regularMarketDayLow") or info.get("dayLow")),
            fifty_two_week_high=to_decimal(info.get("fiftyTwoWeekHigh")),
            fifty_two_week_low=to_decimal(info.get("fiftyTwoWeekLow")),
        )

    async def fetch_historical(
        self,
        symbol: str,
        start_date: date,
        end_date: date,
        interval: str = "1d",
    ) -> List[HistoricalBar]:
        try:
            history = await asyncio.to_thread(
                self._load_history, symbol, start_date, end_date, interval
            )
        except Exception as exc:
            raise ProviderError(f"Historical request failed for {symbol}: {exc}", symbol) from exc

        if history is None or history.empty:
            self.logger.info("No historical rows for %s between %s and %s", symbol, start_date, end_date)
            return []

        bars = []
        for ts, row in history.iterrows():
            bars.append(HistoricalBar(
                trade_date=ts.date() if hasattr(ts, "date") else None,
                open=to_decimal(row.get("Open")),
                high=to_decimal(row.get("High")),
                low=to_decimal(row.get("Low")),
                close=to_decimal(row.get("Close")),
                volume=to_int(row.get("Volume")),
                adj_close=to_decimal(row.get("Adj Close")),
            ))
        return bars

    async def search_symbols(self, query: str, limit: int = 10) -> List[SymbolMatch]:
        try:
            quotes = await asyncio.to_thread(self._search, query, limit)
        except Exception as exc:
            raise ProviderError(f"Symbol search failed for {query!r}: {exc}") from exc

        matches = []
        for quote in quotes:
            full_symbol = (quote.get("symbol") or "").upper()
            if not full_symbol:
                continue
            matches.append(SymbolMatch(
                symbol=full_symbol,
                full_symbol=full_symbol,
                name=quote.get("longname") or quote.get("shortname") or full_symbol,
                exchange=quote.get("exchange"),
                type=quote.get("quoteType") or "EQUITY",
                score=float(quote.get("score") or 0),
            ))
        return matches

    # ----------------- blocking helpers (run in threads) ----------------- #

    def _load_info(self, symbol: str) -> dict:
        return yf.Ticker(symbol).info or {}

    def _load_history(self, symbol: str, start_date: date, end_date: date, interval: str):
        return yf.Ticker(symbol).history(
            start=start_date,
            end=end_date + timedelta(days=1),
            interval=interval,
            auto_adjust=False,
            actions=False,
            timeout=self.config.provider.historical_timeout_seconds,
        )

    def _search(self, query: str, limit: int) -> list:
        # Over-fetch: callers filter by exchange suffix afterwards
        return yf.Search(query, max_results=max(limit * 3, limit), news_count=0).quotes or []
