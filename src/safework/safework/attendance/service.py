from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional

from ..audit.sink import AuditRecord, AuditSink
from ..common.datetime_utils import attendance_day, now_local
from ..common.validators import require_hour, require_non_empty
from ..core.constants import FAS_STATUS_DOWN, FAS_STATUS_KEY
from ..core.exceptions import NotFoundError, ValidationError
from ..flags.store import FlagStore
from ..users.model import Actor
from ..users.repository import UserRepository
from ..users.service import SiteAccessService
from .model import AccessPolicy, ManualApproval
from .repository import AccessPolicyRepository, ManualApprovalRepository

logger = logging.getLogger(__name__)


class AccessPolicyService:
    """Use case: read and change a site's attendance policy."""

    def __init__(self, policies: AccessPolicyRepository, site_access: SiteAccessService, audit: AuditSink):
        self._policies = policies
        self._site_access = site_access
        self._audit = audit

    def get_policy(self, site_id: int) -> AccessPolicy:
        return self._policies.get(int(site_id)) or AccessPolicy(site_id=int(site_id))

    def update_policy(
        self,
        *,
        actor: Actor | None,
        site_id: int,
        require_checkin: Optional[bool] = None,
        day_cutoff_hour: Optional[int] = None,
    ) -> AccessPolicy:
        self._site_access.require_site_admin(actor, site_id)

        if require_checkin is not None and not isinstance(require_checkin, bool):
            raise ValidationError("requireCheckin은(는) true/false 값이어야 합니다")
        if day_cutoff_hour is not None:
            day_cutoff_hour = require_hour(day_cutoff_hour, "dayCutoffHour")

        current = self.get_policy(site_id)
        updated = AccessPolicy(
            site_id=int(site_id),
            require_checkin=current.require_checkin if require_checkin is None else require_checkin,
            day_cutoff_hour=current.day_cutoff_hour if day_cutoff_hour is None else day_cutoff_hour,
        )
        saved = self._policies.upsert(updated)

        self._audit.record(
            AuditRecord(
                action="ACCESS_POLICY_UPDATED",
                actor_id=actor.user_id,
                target_type="SITE",
                target_id=int(site_id),
                reason=f"requireCheckin={saved.require_checkin}, dayCutoffHour={saved.day_cutoff_hour}",
            )
        )
        return saved


class ManualApprovalService:
    """Use case: admin grants a date-scoped bypass for a missing check-in."""

    def __init__(
        self,
        approvals: ManualApprovalRepository,
        users: UserRepository,
        policies: AccessPolicyRepository,
        site_access: SiteAccessService,
        audit: AuditSink,
    ):
        self._approvals = approvals
        self._users = users
        self._policies = policies
        self._site_access = site_access
        self._audit = audit

    def grant(
        self,
        *,
        actor: Actor | None,
        user_id: int,
        site_id: int,
        reason: str,
        valid_date: Optional[date] = None,
        now: datetime | None = None,
    ) -> ManualApproval:
        self._site_access.require_site_admin(actor, site_id)
        reason = require_non_empty(reason, "사유")

        if not self._users.get_by_id(int(user_id)):
            raise NotFoundError("사용자를 찾을 수 없습니다")

        if valid_date is None:
            policy = self._policies.get(int(site_id)) or AccessPolicy(site_id=int(site_id))
            valid_date = attendance_day(now or now_local(), cutoff_hour=policy.day_cutoff_hour)

        approval = self._approvals.create(
            user_id=int(user_id),
            site_id=int(site_id),
            valid_date=valid_date,
            approved_by_id=actor.user_id,
            reason=reason,
        )
        self._audit.record(
            AuditRecord(
                action="MANUAL_APPROVAL_CREATED",
                actor_id=actor.user_id,
                target_type="MANUAL_APPROVAL",
                target_id=approval.approval_id,
                reason=f"User: {user_id}, Site: {site_id}, Date: {valid_date.isoformat()}",
            )
        )
        return approval


class FasStatusService:
    """Maintains the FAS circuit-breaker flag read by the attendance gate."""

    def __init__(self, flags: FlagStore):
        self._flags = flags

    def mark_down(self, *, ttl_seconds: Optional[int] = None) -> None:
        logger.warning("FAS marked down (ttl=%s)", ttl_seconds)
        self._flags.put(FAS_STATUS_KEY, FAS_STATUS_DOWN, ttl_seconds=ttl_seconds)

    def mark_up(self) -> None:
        logger.info("FAS marked up")
        self._flags.delete(FAS_STATUS_KEY)

    def is_down(self) -> bool:
        return self._flags.get(FAS_STATUS_KEY) == FAS_STATUS_DOWN
