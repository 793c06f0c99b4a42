from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..attendance.gate import AttendanceGate, normalize_site_id
from ..common.datetime_utils import now_local
from ..common.validators import optional_bool, optional_enum, optional_text, require_enum, require_non_empty
from ..core.enums import ActionStatus, Category, ReviewStatus, RiskLevel
from ..core.exceptions import AuthorizationError, ValidationError
from ..users.model import Actor
from ..users.repository import UserRepository
from .model import NewReport, Report
from .repository import ReportRepository

logger = logging.getLogger(__name__)


class ReportService:
    """Use case: a worker on site submits a safety report."""

    def __init__(self, reports: ReportRepository, users: UserRepository, gate: AttendanceGate):
        self._reports = reports
        self._users = users
        self._gate = gate

    def submit(
        self,
        *,
        actor: Actor | None,
        site_id: int | str | None,
        category: Category | str,
        content: str,
        risk_level: RiskLevel | str | None = None,
        location_floor: Optional[str] = None,
        location_zone: Optional[str] = None,
        is_urgent: bool | None = False,
        now: datetime | None = None,
    ) -> Report:
        site = normalize_site_id(site_id)
        if site is None:
            raise ValidationError("현장 ID가 필요합니다")

        now = now or now_local()
        self._gate.check(actor, site, now=now)

        author = self._users.get_by_id(actor.user_id)
        if author and author.is_restricted(now):
            raise AuthorizationError(
                f"허위 제보 누적으로 {author.restricted_until:%Y-%m-%d %H:%M}까지 제보가 제한되었습니다"
            )

        new_report = NewReport(
            site_id=site,
            author_id=actor.user_id,
            category=require_enum(Category, category, "category"),
            risk_level=optional_enum(RiskLevel, risk_level, "riskLevel"),
            location_floor=optional_text(location_floor, "locationFloor"),
            location_zone=optional_text(location_zone, "locationZone"),
            content=require_non_empty(content, "내용"),
            is_urgent=optional_bool(is_urgent, "isUrgent"),
            created_at=now,
        )
        report_id = self._reports.create(new_report)
        logger.info("report %s submitted by %s on site %s", report_id, actor.user_id, site)

        return Report(
            report_id=report_id,
            site_id=new_report.site_id,
            author_id=new_report.author_id,
            category=new_report.category,
            risk_level=new_report.risk_level,
            review_status=ReviewStatus.PENDING,
            action_status=ActionStatus.NONE,
            is_urgent=new_report.is_urgent,
            location_floor=new_report.location_floor,
            location_zone=new_report.location_zone,
            content=new_report.content,
            created_at=now,
        )
