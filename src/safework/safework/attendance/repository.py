from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol

from .model import AccessPolicy, ManualApproval


class AttendanceRepository(Protocol):
    def has_checkin(self, *, user_id: int, start: datetime, end: datetime, site_id: Optional[int] = None) -> bool:
        """Any AttendanceRecord (internal or FAS) in [start, end); all sites when site_id is None."""

        raise NotImplementedError


class ManualApprovalRepository(Protocol):
    def exists(self, *, user_id: int, site_id: int, valid_date: date) -> bool:
        raise NotImplementedError

    def create(self, *, user_id: int, site_id: int, valid_date: date, approved_by_id: int, reason: str) -> ManualApproval:
        raise NotImplementedError


class AccessPolicyRepository(Protocol):
    def get(self, site_id: int) -> Optional[AccessPolicy]:
        raise NotImplementedError

    def upsert(self, policy: AccessPolicy) -> AccessPolicy:
        raise NotImplementedError
