"""
Provider rate limiter.

Enforces a global minimum spacing between any two provider admissions and an
independent minimum spacing per key (symbol). All admissions pass through a
single FIFO gate: the global interval couples every key, so per-key locks
alone could admit two different keys at the same instant.
"""
import asyncio
import time
from typing import Awaitable, Callable, Dict, Optional

from watchlist_sync.utils.logger import get_logger


class RateLimiter:
    """Global + per-key rate limiter with serialized admission"""

    def __init__(
        self,
        global_min_interval: float = 0.2,
        per_key_min_interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Args:
            global_min_interval: Seconds between any two admissions
            per_key_min_interval: Seconds between two admissions for the same key
            clock: Monotonic time source (injectable for tests)
            sleep: Coroutine used to wait (injectable for tests)
        """
        self.global_min_interval = global_min_interval
        self.per_key_min_interval = per_key_min_interval
        self._clock = clock
        self._sleep = sleep
        # asyncio.Lock wakes waiters in arrival order; one per event loop
        self._gate: Optional[asyncio.Lock] = None
        self._gate_loop: Optional[asyncio.AbstractEventLoop] = None
        self._global_last: Optional[float] = None
        self._last_by_key: Dict[str, float] = {}
        self.logger = get_logger(__name__)

    def _admission_gate(self) -> asyncio.Lock:
        loop = asyncio.get_running_loop()
        if self._gate is None or self._gate_loop is not loop:
            self._gate = asyncio.Lock()
            self._gate_loop = loop
        return self._gate

    def _wait_time(self, key: str, now: float) -> float:
        wait = 0.0
        if self._global_last is not None:
            wait = max(wait, self._global_last + self.global_min_interval - now)
        last = self._last_by_key.get(key)
        if last is not None:
            wait = max(wait, last + self.per_key_min_interval - now)
        return wait

    async def acquire(self, key: str) -> float:
        """
        Wait until both the global and the per-key spacing allow a request.

        Never fails and has no timeout of its own; callers that need a
        deadline wrap this call themselves.

        Returns:
            The clock value at which the admission was granted
        """
        async with self._admission_gate():
            while True:
                wait = self._wait_time(key, self._clock())
                if wait <= 0:
                    break
                self.logger.debug("Rate limit: %s waits %.3fs", key, wait)
                await self._sleep(wait)

            granted = self._clock()
            self._global_last = granted
            self._last_by_key[key] = granted
            return granted

    def last_admitted(self, key: str) -> Optional[float]:
        """Clock value of the last admission for a key, if any"""
        return self._last_by_key.get(key)

    @property
    def global_last_admitted(self) -> Optional[float]:
        return self._global_last


# Process-wide instance shared by every trigger
_rate_limiter: Optional[RateLimiter] = None


def get_rate_limiter(config=None) -> RateLimiter:
    """
    Get the process-wide rate limiter, creating it from config on first use.

    Spacing state survives across event loops (successive asyncio.run
    calls); the admission lock is recreated for each running loop.

    Args:
        config: Config object (only used on first call)
    """
    global _rate_limiter
    if _rate_limiter is None:
        if config is None:
            _rate_limiter = RateLimiter()
        else:
            _rate_limiter = RateLimiter(
                global_min_interval=config.rate_limit.global_min_interval_seconds,
                per_key_min_interval=config.rate_limit.per_symbol_min_interval_seconds,
            )
    return _rate_limiter


def reset_rate_limiter() -> None:
    """Drop the process-wide instance. Useful for testing."""
    global _rate_limiter
    _rate_limiter = None
