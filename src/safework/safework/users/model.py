from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import MembershipRole, MembershipStatus, Role


@dataclass(frozen=True)
class User:
    """Domain entity: a worker or administrator account.

    Note: plain data object, no DB access here.
    """

    user_id: int
    name: str
    role: Role
    is_active: bool = True
    false_report_count: int = 0
    restricted_until: Optional[datetime] = None

    def is_restricted(self, now: datetime) -> bool:
        return self.restricted_until is not None and self.restricted_until > now


@dataclass(frozen=True)
class SiteMembership:
    user_id: int
    site_id: int
    role: MembershipRole
    status: MembershipStatus

    @property
    def is_active(self) -> bool:
        return self.status == MembershipStatus.ACTIVE


@dataclass(frozen=True)
class Actor:
    """The authenticated caller of an operation (what the session carries)."""

    user_id: int
    role: Role

    @property
    def is_super_admin(self) -> bool:
        return self.role == Role.SUPER_ADMIN
