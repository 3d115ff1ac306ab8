"""
Daily update job - scheduled trigger for the whole stored universe.

Pages the symbol list, synchronizes each page through SyncService, waits
between pages, then prunes price points past the retention window.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Awaitable, Callable, List, Optional, Tuple

from watchlist_sync.config import Config
from watchlist_sync.errors import PersistenceError, ValidationError
from watchlist_sync.models.results import BatchReport, UpdateResult
from watchlist_sync.services.batch_scheduler import chunk
from watchlist_sync.services.sync_service import SyncService
from watchlist_sync.utils.logger import get_logger
from watchlist_sync.utils.symbols import to_storage_symbol


@dataclass
class DailyJobSummary:
    total: int = 0
    succeeded: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    pages: int = 0
    cleanup_cutoff: Optional[date] = None
    deleted: Optional[int] = None  # None when cleanup was skipped

    @property
    def success_rate(self) -> float:
        return len(self.succeeded) / self.total * 100 if self.total else 0.0

    @property
    def message(self) -> str:
        if not self.total:
            return "No stocks to update"
        return f"Daily update completed: {len(self.succeeded)}/{self.total} stocks updated"

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "success": list(self.succeeded),
            "failed": list(self.failed),
            "successRate": f"{self.success_rate:.1f}%",
            "cleanup": (
                f"{self.deleted} old records cleaned" if self.deleted is not None else "Cleanup skipped"
            ),
        }


class DailyUpdateJob:
    """Scheduled refresh of every stored security."""

    def __init__(
        self,
        sync_service: SyncService,
        config: Config,
        today: Optional[Callable[[], date]] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.sync_service = sync_service
        self.security_repo = sync_service.security_repo
        self.price_repo = sync_service.price_repo
        self.config = config
        self.today = today or date.today
        self._sleep = sleep
        self.logger = get_logger(__name__)

    async def run(self) -> DailyJobSummary:
        """Run every page, then retention cleanup."""
        settings = self.config.daily_job
        self.logger.info("Starting daily stock update job")

        symbols = await self.security_repo.list_symbols()
        if not symbols:
            self.logger.info("No stocks to update")
            return DailyJobSummary()

        report, valid = self._partition(symbols)
        pages = chunk(valid, settings.page_size)
        self.logger.info(
            "Found %s stocks, processing %s pages of up to %s",
            len(symbols), len(pages), settings.page_size,
        )

        for index, page in enumerate(pages, start=1):
            self.logger.info("Processing page %s/%s (%s stocks)", index, len(pages), len(page))
            report = report.merge(await self.sync_service.synchronize(page, settings.concurrency))

            if index < len(pages):
                self.logger.info("Waiting %ss before next page...", settings.page_delay_seconds)
                await self._sleep(settings.page_delay_seconds)

        summary = DailyJobSummary(
            total=report.total,
            succeeded=report.succeeded,
            failed=report.failed,
            pages=len(pages),
        )
        self.logger.info(
            "Daily stock update completed: %s success, %s failed (%.1f%%)",
            len(summary.succeeded), len(summary.failed), summary.success_rate,
        )

        await self._cleanup(summary)
        return summary

    def _partition(self, symbols: List[str]) -> Tuple[BatchReport, List[str]]:
        """Split stored symbols into a report of invalid ones and the valid storage symbols."""
        suffix = self.config.provider.default_suffix
        report = BatchReport(total=0)
        valid = []
        for symbol in symbols:
            try:
                valid.append(to_storage_symbol(symbol, suffix))
            except ValidationError as exc:
                self.logger.error("Skipping stored symbol %r: %s", symbol, exc)
                report.total += 1
                report.failed.append(symbol)
                report.results[symbol] = UpdateResult.failed(symbol, exc)
        return report, list(dict.fromkeys(valid))

    async def _cleanup(self, summary: DailyJobSummary) -> None:
        cutoff = self.today() - timedelta(days=self.config.daily_job.retention_days)
        summary.cleanup_cutoff = cutoff
        try:
            summary.deleted = await self.price_repo.delete_before(cutoff)
            self.logger.info("Cleaned up %s old records", summary.deleted)
        except PersistenceError as exc:
            self.logger.warning("Data cleanup before %s skipped: %s", cutoff, exc)
