from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from ..core.enums import ActionStatus, Category, ReviewStatus, RiskLevel


@dataclass(frozen=True)
class Report:
    """Domain entity: a safety-incident report ("post") submitted by a worker."""

    report_id: int
    site_id: int
    author_id: int
    category: Category
    risk_level: Optional[RiskLevel]
    review_status: ReviewStatus
    action_status: ActionStatus
    is_urgent: bool
    location_floor: Optional[str]
    location_zone: Optional[str]
    content: str
    created_at: datetime
    reviewed_at: Optional[datetime] = None

    def with_status(self, status: "StatusSnapshot", *, reviewed_at: Optional[datetime] = None, content: Optional[str] = None) -> "Report":
        return replace(
            self,
            review_status=status.review_status,
            action_status=status.action_status,
            is_urgent=status.is_urgent,
            reviewed_at=reviewed_at or self.reviewed_at,
            content=content if content is not None else self.content,
        )

    @property
    def status(self) -> "StatusSnapshot":
        return StatusSnapshot(
            review_status=self.review_status,
            action_status=self.action_status,
            is_urgent=self.is_urgent,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.report_id,
            "siteId": self.site_id,
            "authorId": self.author_id,
            "category": self.category.value,
            "riskLevel": self.risk_level.value if self.risk_level else None,
            "reviewStatus": self.review_status.value,
            "actionStatus": self.action_status.value,
            "isUrgent": self.is_urgent,
            "locationFloor": self.location_floor,
            "locationZone": self.location_zone,
            "content": self.content,
            "createdAt": self.created_at.isoformat(),
            "reviewedAt": self.reviewed_at.isoformat() if self.reviewed_at else None,
        }


@dataclass(frozen=True)
class StatusSnapshot:
    """The columns guarded by the optimistic (compare-and-swap) update."""

    review_status: ReviewStatus
    action_status: ActionStatus
    is_urgent: bool


@dataclass(frozen=True)
class NewReport:
    site_id: int
    author_id: int
    category: Category
    risk_level: Optional[RiskLevel]
    location_floor: Optional[str]
    location_zone: Optional[str]
    content: str
    is_urgent: bool
    created_at: datetime
