"""
Batch scheduler - run an update coroutine over many symbols with bounded concurrency.
"""
import asyncio
from typing import Awaitable, Callable, Dict, Iterable, List, Optional

from watchlist_sync.errors import ValidationError
from watchlist_sync.models.results import BatchReport, UpdateResult
from watchlist_sync.utils.logger import get_logger

UpdateFn = Callable[[str], Awaitable[UpdateResult]]


class BatchScheduler:
    """
    Bounded worker pool over a symbol list.

    At most `concurrency` updates are in flight. Every symbol gets exactly one
    outcome; an exception escaping an update becomes that symbol's failure and
    never reaches the other workers or the caller.
    """

    def __init__(self, update: UpdateFn):
        """
        Args:
            update: Coroutine function returning an UpdateResult for one symbol
        """
        self.update = update
        self.logger = get_logger(__name__)

    async def run(self, symbols: Iterable[str], concurrency: int) -> BatchReport:
        """
        Update every symbol and partition the outcomes.

        Args:
            symbols: Symbols to update; exact duplicates are collapsed
            concurrency: Maximum number of updates in flight (>= 1)

        Returns:
            BatchReport with succeeded/failed in input order
        """
        if not isinstance(concurrency, int) or isinstance(concurrency, bool) or concurrency < 1:
            raise ValidationError(f"concurrency must be a positive integer, got {concurrency!r}")

        ordered = list(dict.fromkeys(symbols))
        if not ordered:
            return BatchReport(total=0)

        queue: "asyncio.Queue[str]" = asyncio.Queue()
        for symbol in ordered:
            queue.put_nowait(symbol)

        outcomes: Dict[str, UpdateResult] = {}
        workers = min(concurrency, len(ordered))
        self.logger.info("Updating %s symbols with %s workers", len(ordered), workers)

        await asyncio.gather(*(
            self._worker(queue, outcomes) for _ in range(workers)
        ))

        report = BatchReport(total=len(ordered))
        for symbol in ordered:
            result = outcomes[symbol]
            report.results[symbol] = result
            if result.success:
                report.succeeded.append(symbol)
            else:
                report.failed.append(symbol)

        self.logger.info(
            "Batch complete: %s succeeded, %s failed (%.1f%%)",
            len(report.succeeded), len(report.failed), report.success_rate,
        )
        return report

    async def _worker(self, queue: "asyncio.Queue[str]", outcomes: Dict[str, UpdateResult]):
        while True:
            try:
                symbol = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            outcomes[symbol] = await self._run_one(symbol)

    async def _run_one(self, symbol: str) -> UpdateResult:
        try:
            result: Optional[UpdateResult] = await self.update(symbol)
        except Exception as exc:
            self.logger.exception("Unhandled error updating %s", symbol)
            return UpdateResult.failed(symbol, exc)

        if result is None:
            return UpdateResult.failed(symbol, RuntimeError("update returned no result"))
        return result


def chunk(symbols: List[str], size: int) -> List[List[str]]:
    """Split symbols into fixed-size pages (the last page may be shorter)."""
    if size < 1:
        raise ValidationError(f"page size must be positive, got {size!r}")
    return [symbols[i:i + size] for i in range(0, len(symbols), size)]
