from __future__ import annotations

from dataclasses import dataclass

from .attendance.gate import AttendanceGate
from .attendance.mysql_attendance_repository import (
    MySQLAccessPolicyRepository,
    MySQLAttendanceRepository,
    MySQLManualApprovalRepository,
)
from .attendance.repository import AccessPolicyRepository, AttendanceRepository, ManualApprovalRepository
from .attendance.service import AccessPolicyService, FasStatusService, ManualApprovalService
from .audit.sink import AuditSink, LoggingAuditSink
from .core.constants import DAILY_POINT_CAP, DAILY_POST_LIMIT
from .database.connection import DBConfig, DatabaseConnection
from .flags.store import FlagStore, MySQLFlagStore
from .points.engine import PointsEngine
from .points.mysql_points_repository import MySQLPointsRepository
from .points.repository import PointsRepository
from .points.service import PointsService
from .ratelimit.limiter import FallbackRateLimiter, MySQLRateLimiter, RateLimiter
from .reports.mysql_report_repository import MySQLReportRepository
from .reports.repository import ReportRepository
from .reports.service import ReportService
from .reviews.mysql_review_repository import MySQLReviewRepository
from .reviews.repository import ReviewRepository
from .reviews.service import ReviewStateMachine
from .users.mysql_user_repository import MySQLMembershipRepository, MySQLUserRepository
from .users.repository import MembershipRepository, UserRepository
from .users.service import FalseReportTracker, SiteAccessService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    memberships_repo: MembershipRepository
    reports_repo: ReportRepository
    reviews_repo: ReviewRepository
    points_repo: PointsRepository
    attendance_repo: AttendanceRepository
    manual_approvals_repo: ManualApprovalRepository
    access_policies_repo: AccessPolicyRepository
    flags: FlagStore
    rate_limiter: RateLimiter
    audit: AuditSink

    site_access: SiteAccessService
    points_engine: PointsEngine
    attendance_gate: AttendanceGate
    review_service: ReviewStateMachine
    report_service: ReportService
    points_service: PointsService
    access_policy_service: AccessPolicyService
    manual_approval_service: ManualApprovalService
    fas_status_service: FasStatusService


def assemble(
    *,
    users_repo: UserRepository,
    memberships_repo: MembershipRepository,
    reports_repo: ReportRepository,
    reviews_repo: ReviewRepository,
    points_repo: PointsRepository,
    attendance_repo: AttendanceRepository,
    manual_approvals_repo: ManualApprovalRepository,
    access_policies_repo: AccessPolicyRepository,
    flags: FlagStore,
    rate_limiter: RateLimiter,
    audit: AuditSink | None = None,
    require_attendance_for_post: bool = True,
    daily_point_cap: int = DAILY_POINT_CAP,
    daily_post_limit: int = DAILY_POST_LIMIT,
) -> Container:
    """Wire services on top of the given repositories (MySQL or in-memory fakes)."""
    audit = audit or LoggingAuditSink()

    site_access = SiteAccessService(memberships_repo)
    points_engine = PointsEngine(
        points_repo,
        reports_repo,
        daily_point_cap=daily_point_cap,
        daily_post_limit=daily_post_limit,
    )
    attendance_gate = AttendanceGate(
        attendance_repo,
        manual_approvals_repo,
        access_policies_repo,
        site_access,
        flags,
        require_attendance_for_post=require_attendance_for_post,
    )
    review_service = ReviewStateMachine(
        reports_repo,
        reviews_repo,
        points_repo,
        points_engine,
        site_access,
        attendance_gate,
        FalseReportTracker(users_repo),
        audit,
    )

    return Container(
        users_repo=users_repo,
        memberships_repo=memberships_repo,
        reports_repo=reports_repo,
        reviews_repo=reviews_repo,
        points_repo=points_repo,
        attendance_repo=attendance_repo,
        manual_approvals_repo=manual_approvals_repo,
        access_policies_repo=access_policies_repo,
        flags=flags,
        rate_limiter=rate_limiter,
        audit=audit,
        site_access=site_access,
        points_engine=points_engine,
        attendance_gate=attendance_gate,
        review_service=review_service,
        report_service=ReportService(reports_repo, users_repo, attendance_gate),
        points_service=PointsService(points_repo, site_access),
        access_policy_service=AccessPolicyService(access_policies_repo, site_access, audit),
        manual_approval_service=ManualApprovalService(
            manual_approvals_repo, users_repo, access_policies_repo, site_access, audit
        ),
        fas_status_service=FasStatusService(flags),
    )


def build_container(*, db_config: dict, require_attendance_for_post: bool = True) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return assemble(
        users_repo=MySQLUserRepository(conn),
        memberships_repo=MySQLMembershipRepository(conn),
        reports_repo=MySQLReportRepository(conn),
        reviews_repo=MySQLReviewRepository(conn),
        points_repo=MySQLPointsRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        manual_approvals_repo=MySQLManualApprovalRepository(conn),
        access_policies_repo=MySQLAccessPolicyRepository(conn),
        flags=MySQLFlagStore(conn),
        rate_limiter=FallbackRateLimiter(MySQLRateLimiter(conn)),
        require_attendance_for_post=require_attendance_for_post,
    )
