from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.constants import DEFAULT_DAY_CUTOFF_HOUR, DEFAULT_REQUIRE_CHECKIN
from ..core.enums import AttendanceSource


@dataclass(frozen=True)
class AttendanceRecord:
    """A physical check-in, either local or cross-matched from FAS."""

    user_id: int
    site_id: int
    checkin_at: datetime
    source: AttendanceSource = AttendanceSource.INTERNAL
    external_worker_id: Optional[str] = None


@dataclass(frozen=True)
class ManualApproval:
    """Admin-granted, date-scoped substitute for a missing check-in."""

    approval_id: int
    user_id: int
    site_id: int
    valid_date: date
    approved_by_id: int
    reason: str
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.approval_id,
            "userId": self.user_id,
            "siteId": self.site_id,
            "validDate": self.valid_date.isoformat(),
            "approvedById": self.approved_by_id,
            "reason": self.reason,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class AccessPolicy:
    site_id: int
    require_checkin: bool = DEFAULT_REQUIRE_CHECKIN
    day_cutoff_hour: int = DEFAULT_DAY_CUTOFF_HOUR

    def to_dict(self) -> dict:
        return {
            "siteId": self.site_id,
            "requireCheckin": self.require_checkin,
            "dayCutoffHour": self.day_cutoff_hour,
        }


@dataclass(frozen=True)
class GateDecision:
    allowed: bool
    reason: str
    attendance_day: Optional[date] = None
