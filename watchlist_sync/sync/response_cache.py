"""
Short-lived response cache for provider results.

Backed by cachetools.TTLCache: entries expire after the freshness window and
the least recently used entry is evicted once max_entries is reached.
"""
import math
import time
from typing import Any, Callable, Optional

from cachetools import TTLCache

from watchlist_sync.utils.logger import get_logger


class ResponseCache:
    """Time-boxed memoization keyed by request identity"""

    def __init__(
        self,
        freshness_seconds: float = 300.0,
        max_entries: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.freshness_seconds = freshness_seconds
        self.max_entries = max_entries
        self._clock = clock
        # Values are stored with their write time; an entry exactly one
        # window old is already stale
        self._entries: TTLCache = TTLCache(
            maxsize=max_entries if max_entries is not None else math.inf,
            ttl=freshness_seconds,
            timer=clock,
        )
        self.logger = get_logger(__name__)

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value if it is still fresh, else None."""
        entry = self._entries.get(key)
        if entry is None:
            return None

        value, stored_at = entry
        if self._clock() - stored_at >= self.freshness_seconds:
            return None
        return value

    def put(self, key: str, value: Any) -> None:
        """Record a value with the current time. Last write wins."""
        self._entries[key] = (value, self._clock())

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()


_response_cache: Optional[ResponseCache] = None


def get_response_cache(config=None) -> ResponseCache:
    """Get the process-wide response cache, creating it from config on first use."""
    global _response_cache
    if _response_cache is None:
        if config is None:
            _response_cache = ResponseCache()
        else:
            _response_cache = ResponseCache(
                freshness_seconds=config.cache.freshness_seconds,
                max_entries=config.cache.max_entries,
            )
    return _response_cache


def reset_response_cache() -> None:
    """Drop the process-wide instance. Useful for testing."""
    global _response_cache
    _response_cache = None


def quote_key(provider_symbol: str) -> str:
    return f"quote:{provider_symbol}"


def history_key(provider_symbol: str, start, end, interval: str) -> str:
    return f"history:{provider_symbol}:{start}:{end}:{interval}"
