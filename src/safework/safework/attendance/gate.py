from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Union

from ..common.datetime_utils import attendance_day, day_range, now_local
from ..core.constants import DEFAULT_DAY_CUTOFF_HOUR, FAS_STATUS_DOWN, FAS_STATUS_KEY
from ..core.exceptions import AuthorizationError, ValidationError
from ..flags.store import FlagStore
from ..users.model import Actor
from ..users.service import SiteAccessService
from .model import AccessPolicy, GateDecision
from .repository import AccessPolicyRepository, AttendanceRepository, ManualApprovalRepository

logger = logging.getLogger(__name__)


def normalize_site_id(site_id: Union[int, str, None]) -> Optional[int]:
    """Blank or whitespace-only site ids mean "no site context"."""
    if site_id is None:
        return None
    if isinstance(site_id, str):
        site_id = site_id.strip()
        if not site_id:
            return None
    try:
        return int(site_id)
    except (TypeError, ValueError):
        raise ValidationError(f"현장 ID가 올바르지 않습니다: {site_id}")


class AttendanceGate:
    """Decides whether a worker is present on site and may act.

    Order of checks: global flag without site context, authentication and
    site membership, site access policy, FAS circuit breaker, same-day
    check-in, then manual approval as the fallback.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        manual_approvals: ManualApprovalRepository,
        policies: AccessPolicyRepository,
        site_access: SiteAccessService,
        flags: FlagStore,
        *,
        require_attendance_for_post: bool = True,
    ):
        self._attendance = attendance
        self._manual_approvals = manual_approvals
        self._policies = policies
        self._site_access = site_access
        self._flags = flags
        self._require_for_post = bool(require_attendance_for_post)

    def check(self, actor: Actor | None, site_id: Union[int, str, None] = None, *, now: datetime | None = None) -> GateDecision:
        now = now or now_local()
        site = normalize_site_id(site_id)

        if site is None and not self._require_for_post:
            return GateDecision(allowed=True, reason="ATTENDANCE_NOT_REQUIRED")

        actor = self._site_access.require_authenticated(actor)

        policy: AccessPolicy | None = None
        if site is not None:
            if not self._site_access.active_membership(actor, site):
                raise AuthorizationError("해당 현장의 활성 구성원이 아닙니다")
            policy = self._policies.get(site) or AccessPolicy(site_id=site)
            if not policy.require_checkin and not self._require_for_post:
                return GateDecision(allowed=True, reason="POLICY_NOT_REQUIRED")

        if self._is_fas_down():
            logger.warning("FAS is down, bypassing attendance check user=%s site=%s", actor.user_id, site)
            return GateDecision(allowed=True, reason="FAS_DOWN_BYPASS")

        cutoff = policy.day_cutoff_hour if policy else DEFAULT_DAY_CUTOFF_HOUR
        day = attendance_day(now, cutoff_hour=cutoff)
        start, end = day_range(day, cutoff_hour=cutoff)

        if self._attendance.has_checkin(user_id=actor.user_id, site_id=site, start=start, end=end):
            return GateDecision(allowed=True, reason="CHECKED_IN", attendance_day=day)

        if site is not None and self._manual_approvals.exists(user_id=actor.user_id, site_id=site, valid_date=day):
            return GateDecision(allowed=True, reason="MANUAL_APPROVAL", attendance_day=day)

        logger.info("attendance gate denied user=%s site=%s day=%s", actor.user_id, site, day)
        raise AuthorizationError("오늘 출근 기록이 없습니다. 출근 인증 후 다시 시도해 주세요")

    def _is_fas_down(self) -> bool:
        try:
            return self._flags.get(FAS_STATUS_KEY) == FAS_STATUS_DOWN
        except Exception:
            logger.warning("could not read FAS status flag, assuming up", exc_info=True)
            return False
