from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import BlockReason, ReviewAction
from ..points.model import NewLedgerEntry
from ..reports.model import Report, StatusSnapshot


@dataclass(frozen=True)
class ReviewEvent:
    """Append-only audit trail entry; one per accepted transition."""

    review_id: int
    report_id: int
    admin_id: int
    action: ReviewAction
    created_at: datetime
    reason_code: Optional[str] = None
    comment: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.review_id,
            "postId": self.report_id,
            "adminId": self.admin_id,
            "action": self.action.value,
            "reasonCode": self.reason_code,
            "comment": self.comment,
            "createdAt": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class NewReviewEvent:
    report_id: int
    admin_id: int
    action: ReviewAction
    created_at: datetime
    reason_code: Optional[str] = None
    comment: Optional[str] = None


@dataclass(frozen=True)
class TransitionCommit:
    """Everything one accepted transition writes, applied as a single batch.

    ``expected`` is the status the report was read with; the store must
    refuse the whole batch when the row no longer matches it.
    """

    report_id: int
    expected: StatusSnapshot
    new: StatusSnapshot
    event: NewReviewEvent
    ledger_entries: tuple[NewLedgerEntry, ...] = ()
    reviewed_at: Optional[datetime] = None
    content: Optional[str] = None


@dataclass(frozen=True)
class ReviewOutcome:
    report: Report
    event: ReviewEvent
    points_delta: int
    breakdown: Optional[str] = None
    blocked: bool = False
    block_reason: Optional[BlockReason] = None

    @property
    def review_event_id(self) -> int:
        return self.event.review_id
