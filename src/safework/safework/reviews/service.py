from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..attendance.gate import AttendanceGate
from ..audit.sink import AuditRecord, AuditSink
from ..common.datetime_utils import now_local
from ..common.validators import optional_text, require_enum, require_non_empty
from ..core.constants import DEFAULT_HISTORY_LIMIT, RESUBMIT_BONUS_POINTS
from ..core.enums import PointsReason, RejectReason, ReviewAction
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..points.engine import PointsEngine
from ..points.model import NewLedgerEntry
from ..points.repository import PointsRepository
from ..reports.model import Report
from ..reports.repository import ReportRepository
from ..users.model import Actor
from ..users.service import FalseReportTracker, SiteAccessService
from .model import NewReviewEvent, ReviewEvent, ReviewOutcome, TransitionCommit
from .repository import ReviewRepository
from .transitions import ADMIN_ACTIONS, next_status

logger = logging.getLogger(__name__)


class ReviewStateMachine:
    """Use case: move a report through review and settle the points it earns.

    Every transition reads the report fresh, validates the (status, action)
    pair without side effects, then commits the status change, the review
    event and any ledger rows as one compare-and-swap batch.
    """

    def __init__(
        self,
        reports: ReportRepository,
        reviews: ReviewRepository,
        points: PointsRepository,
        engine: PointsEngine,
        site_access: SiteAccessService,
        gate: AttendanceGate,
        false_reports: FalseReportTracker,
        audit: AuditSink,
    ):
        self._reports = reports
        self._reviews = reviews
        self._points = points
        self._engine = engine
        self._site_access = site_access
        self._gate = gate
        self._false_reports = false_reports
        self._audit = audit

    def apply_review(
        self,
        *,
        report_id: int,
        action: ReviewAction | str,
        actor: Actor | None,
        reason_code: Optional[str] = None,
        comment: Optional[str] = None,
        now: datetime | None = None,
    ) -> ReviewOutcome:
        action = require_enum(ReviewAction, action, "action")
        if action not in ADMIN_ACTIONS:
            raise ValidationError(f"관리자가 수행할 수 없는 액션입니다: {action.value}")

        actor = self._site_access.require_authenticated(actor)
        report = self._load(report_id)
        self._site_access.require_site_admin(actor, report.site_id)

        reject_reason: RejectReason | None = None
        if action == ReviewAction.REJECT:
            reject_reason = require_enum(RejectReason, require_non_empty(reason_code or "", "반려 사유"), "반려 사유")
        comment = optional_text(comment, "comment")

        new_status = next_status(report.status, action)
        now = now or now_local()

        ledger: list[NewLedgerEntry] = []
        points_delta = 0
        breakdown = None
        blocked = False
        block_reason = None

        if action == ReviewAction.APPROVE:
            already_awarded = self._points.find_entry(report_id=report.report_id, reason=PointsReason.REPORT_APPROVED)
            if already_awarded:
                breakdown = "이미 지급된 제보입니다"
            else:
                award = self._engine.calculate_approval_points(
                    user_id=report.author_id,
                    site_id=report.site_id,
                    report_id=report.report_id,
                    category=report.category,
                    risk_level=report.risk_level,
                    location_floor=report.location_floor,
                    location_zone=report.location_zone,
                    now=now,
                )
                breakdown = award.breakdown
                blocked = award.blocked
                block_reason = award.block_reason
                if not award.blocked and award.total_points > 0:
                    points_delta = award.total_points
                    ledger.append(
                        NewLedgerEntry(
                            user_id=report.author_id,
                            site_id=report.site_id,
                            report_id=report.report_id,
                            amount=points_delta,
                            reason=PointsReason.REPORT_APPROVED,
                            occurred_at=now,
                            reason_text=award.breakdown,
                            admin_id=actor.user_id,
                        )
                    )

        elif reject_reason == RejectReason.FALSE:
            penalty = self._engine.calculate_false_report_penalty(
                user_id=report.author_id,
                site_id=report.site_id,
                report_id=report.report_id,
            )
            breakdown = penalty.breakdown
            if penalty.penalty_amount != 0:
                points_delta = penalty.penalty_amount
                ledger.append(
                    NewLedgerEntry(
                        user_id=report.author_id,
                        site_id=report.site_id,
                        report_id=report.report_id,
                        amount=points_delta,
                        reason=PointsReason.FALSE_REPORT_PENALTY,
                        occurred_at=now,
                        reason_text=penalty.breakdown,
                        admin_id=actor.user_id,
                    )
                )

        reviewed_at = now if new_status.review_status.is_terminal else None
        event = self._commit(
            TransitionCommit(
                report_id=report.report_id,
                expected=report.status,
                new=new_status,
                event=NewReviewEvent(
                    report_id=report.report_id,
                    admin_id=actor.user_id,
                    action=action,
                    created_at=now,
                    reason_code=reject_reason.value if reject_reason else None,
                    comment=comment,
                ),
                ledger_entries=tuple(ledger),
                reviewed_at=reviewed_at,
            )
        )

        if reject_reason == RejectReason.FALSE:
            # The rejection is already committed; a failed counter update must not fail the request.
            try:
                restricted_until = self._false_reports.record(report.author_id, now=now)
            except Exception:
                logger.warning("could not record false report for user %s", report.author_id, exc_info=True)
                restricted_until = None
            if restricted_until:
                logger.warning("user %s restricted until %s after false reports", report.author_id, restricted_until)

        self._audit.record(
            AuditRecord(
                action="POST_REVIEWED",
                actor_id=actor.user_id,
                target_type="POST",
                target_id=report.report_id,
                reason=f"{action.value}: {report.review_status.value} -> {new_status.review_status.value}",
            )
        )
        logger.info(
            "report %s %s by %s (%s -> %s, points %+d)",
            report.report_id,
            action.value,
            actor.user_id,
            report.review_status.value,
            new_status.review_status.value,
            points_delta,
        )

        return ReviewOutcome(
            report=report.with_status(new_status, reviewed_at=reviewed_at),
            event=event,
            points_delta=points_delta,
            breakdown=breakdown,
            blocked=blocked,
            block_reason=block_reason,
        )

    def resubmit(
        self,
        *,
        report_id: int,
        actor: Actor | None,
        supplementary_content: str,
        now: datetime | None = None,
    ) -> ReviewOutcome:
        """Worker answers a REQUEST_MORE: back to PENDING with a small bonus."""
        actor = self._site_access.require_authenticated(actor)
        supplementary_content = require_non_empty(supplementary_content, "보완 내용")
        report = self._load(report_id)
        if report.author_id != actor.user_id:
            raise AuthorizationError("본인이 작성한 제보만 보완 제출할 수 있습니다")

        new_status = next_status(report.status, ReviewAction.RESUBMIT)
        now = now or now_local()
        self._gate.check(actor, report.site_id, now=now)

        content = f"{report.content}\n\n[보완] {supplementary_content}"
        bonus = NewLedgerEntry(
            user_id=actor.user_id,
            site_id=report.site_id,
            report_id=report.report_id,
            amount=RESUBMIT_BONUS_POINTS,
            reason=PointsReason.RESUBMIT_BONUS,
            occurred_at=now,
            reason_text="보완 정보 제출 보너스",
        )
        event = self._commit(
            TransitionCommit(
                report_id=report.report_id,
                expected=report.status,
                new=new_status,
                event=NewReviewEvent(
                    report_id=report.report_id,
                    admin_id=actor.user_id,
                    action=ReviewAction.RESUBMIT,
                    created_at=now,
                    comment=supplementary_content,
                ),
                ledger_entries=(bonus,),
                content=content,
            )
        )

        self._audit.record(
            AuditRecord(
                action="POST_REVIEWED",
                actor_id=actor.user_id,
                target_type="POST",
                target_id=report.report_id,
                reason=f"RESUBMIT: {report.review_status.value} -> {new_status.review_status.value}",
            )
        )
        logger.info("report %s resubmitted by %s", report.report_id, actor.user_id)

        return ReviewOutcome(
            report=report.with_status(new_status, content=content),
            event=event,
            points_delta=RESUBMIT_BONUS_POINTS,
            breakdown=bonus.reason_text,
        )

    def list_reviews(self, report_id: int, actor: Actor | None, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[ReviewEvent]:
        report = self._load(report_id)
        self._site_access.require_member(actor, report.site_id)
        return self._reviews.list_for_report(report.report_id, limit=limit)

    def _load(self, report_id: int) -> Report:
        report = self._reports.get_by_id(int(report_id))
        if not report:
            raise NotFoundError("제보를 찾을 수 없습니다")
        return report

    def _commit(self, commit: TransitionCommit) -> ReviewEvent:
        event = self._reviews.commit_transition(commit)
        if event is None:
            logger.info(
                "conflict on report %s: expected %s/%s",
                commit.report_id,
                commit.expected.review_status.value,
                commit.expected.action_status.value,
            )
            raise ConflictError("다른 관리자가 이미 처리한 제보입니다. 새로고침 후 다시 시도해 주세요")
        return event
