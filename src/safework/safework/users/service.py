from __future__ import annotations

from datetime import datetime, timedelta

from ..core.constants import FALSE_REPORT_RESTRICT_DAYS, FALSE_REPORT_RESTRICT_THRESHOLD
from ..core.enums import MembershipRole
from ..core.exceptions import AuthenticationError, AuthorizationError
from .model import Actor, SiteMembership
from .repository import MembershipRepository, UserRepository

ADMIN_MEMBERSHIP_ROLES = frozenset({MembershipRole.SITE_ADMIN, MembershipRole.MANAGER})


class SiteAccessService:
    """Use case: decide what an actor may do on a given site."""

    def __init__(self, memberships: MembershipRepository):
        self._memberships = memberships

    @staticmethod
    def require_authenticated(actor: Actor | None) -> Actor:
        if actor is None:
            raise AuthenticationError("로그인이 필요합니다")
        return actor

    def active_membership(self, actor: Actor, site_id: int) -> SiteMembership | None:
        membership = self._memberships.get(user_id=actor.user_id, site_id=int(site_id))
        if membership and membership.is_active:
            return membership
        return None

    def require_member(self, actor: Actor | None, site_id: int) -> None:
        actor = self.require_authenticated(actor)
        if actor.is_super_admin:
            return
        if not self.active_membership(actor, site_id):
            raise AuthorizationError("해당 현장의 구성원이 아닙니다")

    def require_site_admin(self, actor: Actor | None, site_id: int) -> None:
        """SUPER_ADMIN, or SITE_ADMIN/MANAGER with an active membership on the site."""
        actor = self.require_authenticated(actor)
        if actor.is_super_admin:
            return
        membership = self.active_membership(actor, site_id)
        if not membership or membership.role not in ADMIN_MEMBERSHIP_ROLES:
            raise AuthorizationError("현장 관리자 권한이 없습니다")


class FalseReportTracker:
    """Counts false reports per author and restricts repeat offenders."""

    def __init__(self, users: UserRepository):
        self._users = users

    def record(self, user_id: int, *, now: datetime) -> datetime | None:
        user = self._users.get_by_id(int(user_id))
        if not user:
            return None

        next_count = user.false_report_count + 1
        restricted_until = None
        if next_count >= FALSE_REPORT_RESTRICT_THRESHOLD and not user.is_restricted(now):
            restricted_until = now + timedelta(days=FALSE_REPORT_RESTRICT_DAYS)

        self._users.record_false_report(user.user_id, restricted_until=restricted_until)
        return restricted_until
