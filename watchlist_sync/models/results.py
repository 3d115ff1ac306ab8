"""
Outcome models returned by the synchronization engine.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel

from watchlist_sync.models.security import Security


class SyncedQuote(BaseModel):
    """Success payload: persisted security fields plus derived price fields"""
    security: Security
    current_price: Optional[Decimal] = None
    previous_close: Optional[Decimal] = None
    change: Decimal = Decimal("0")
    change_percent: Decimal = Decimal("0")
    volume: Optional[int] = None
    day_high: Optional[Decimal] = None
    day_low: Optional[Decimal] = None
    week52_high: Optional[Decimal] = None
    week52_low: Optional[Decimal] = None
    history_points_written: int = 0
    history_error: Optional[str] = None


@dataclass
class UpdateResult:
    """Outcome of one symbol update"""
    symbol: str
    success: bool
    data: Optional[SyncedQuote] = None
    error: Optional[BaseException] = None

    @classmethod
    def ok(cls, symbol: str, data: SyncedQuote) -> "UpdateResult":
        return cls(symbol=symbol, success=True, data=data)

    @classmethod
    def failed(cls, symbol: str, error: BaseException) -> "UpdateResult":
        return cls(symbol=symbol, success=False, error=error)


@dataclass
class BatchReport:
    """
    Per-symbol partition of one batch run.

    succeeded and failed are in input order and together cover every
    distinct input symbol exactly once.
    """
    total: int
    succeeded: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    results: Dict[str, UpdateResult] = field(default_factory=dict)

    @property
    def success_rate(self) -> float:
        if not self.total:
            return 0.0
        return len(self.succeeded) / self.total * 100

    def merge(self, other: "BatchReport") -> "BatchReport":
        """Combine two reports (e.g. consecutive pages of a scheduled run)"""
        results = dict(self.results)
        results.update(other.results)
        return BatchReport(
            total=self.total + other.total,
            succeeded=self.succeeded + other.succeeded,
            failed=self.failed + other.failed,
            results=results,
        )

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "success": list(self.succeeded),
            "failed": list(self.failed),
        }
