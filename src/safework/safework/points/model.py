from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import settle_month
from ..core.enums import BlockReason, PointsReason


@dataclass(frozen=True)
class PointsLedgerEntry:
    """Append-only ledger row. A user's balance is the sum of all entries."""

    entry_id: int
    user_id: int
    site_id: int
    report_id: Optional[int]
    amount: int
    reason_code: str
    settle_month: str
    occurred_at: datetime
    created_at: datetime
    reason_text: Optional[str] = None
    admin_id: Optional[int] = None


@dataclass(frozen=True)
class NewLedgerEntry:
    user_id: int
    site_id: int
    report_id: Optional[int]
    amount: int
    reason: PointsReason
    occurred_at: datetime
    reason_text: Optional[str] = None
    admin_id: Optional[int] = None

    @property
    def settle_month(self) -> str:
        return settle_month(self.occurred_at)

    @property
    def dedupe_key(self) -> Optional[str]:
        """Unique key for entries that may exist at most once per report."""
        if self.report_id is None:
            return None
        if self.reason in (PointsReason.REPORT_APPROVED, PointsReason.FALSE_REPORT_PENALTY):
            return f"{self.reason.value}:{self.report_id}"
        return None


@dataclass(frozen=True)
class PointPolicy:
    site_id: int
    reason_code: str
    default_amount: int
    is_active: bool = True


@dataclass(frozen=True)
class DailyStats:
    """Approvals awarded today for one user on one site."""

    post_count: int
    total_points: int


@dataclass(frozen=True)
class ApprovalPoints:
    blocked: bool
    base_points: int
    risk_bonus: int
    total_points: int
    breakdown: str
    block_reason: Optional[BlockReason] = None

    def to_dict(self) -> dict:
        return {
            "blocked": self.blocked,
            "blockReason": self.block_reason.value if self.block_reason else None,
            "basePoints": self.base_points,
            "riskBonus": self.risk_bonus,
            "totalPoints": self.total_points,
            "breakdown": self.breakdown,
        }


@dataclass(frozen=True)
class FalseReportPenalty:
    penalty_amount: int
    original_amount: int
    breakdown: str
