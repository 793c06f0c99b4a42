from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime

import pytest

from src.safework.safework.attendance.model import AccessPolicy, AttendanceRecord, ManualApproval
from src.safework.safework.audit.sink import AuditRecord
from src.safework.safework.container import Container, assemble
from src.safework.safework.core.enums import (
    ActionStatus,
    Category,
    MembershipRole,
    MembershipStatus,
    PointsReason,
    ReviewStatus,
    RiskLevel,
    Role,
)
from src.safework.safework.core.exceptions import ConflictError
from src.safework.safework.flags.store import InMemoryFlagStore
from src.safework.safework.points.model import DailyStats, NewLedgerEntry, PointPolicy, PointsLedgerEntry
from src.safework.safework.ratelimit.limiter import InMemoryRateLimiter
from src.safework.safework.reports.model import NewReport, Report
from src.safework.safework.reviews.model import ReviewEvent, TransitionCommit
from src.safework.safework.users.model import Actor, SiteMembership, User

SITE = 1
NOW = datetime(2026, 3, 10, 14, 0, 0)


class FakeUserRepo:
    def __init__(self):
        self.users: dict[int, User] = {}

    def add(self, user_id: int, role: Role = Role.WORKER, **kwargs) -> User:
        user = User(user_id=user_id, name=f"user{user_id}", role=role, **kwargs)
        self.users[user_id] = user
        return user

    def get_by_id(self, user_id):
        return self.users.get(int(user_id))

    def record_false_report(self, user_id, *, restricted_until):
        user = self.users.get(int(user_id))
        if not user:
            return False
        self.users[user.user_id] = replace(
            user,
            false_report_count=user.false_report_count + 1,
            restricted_until=restricted_until or user.restricted_until,
        )
        return True


class FakeMembershipRepo:
    def __init__(self):
        self.rows: dict[tuple[int, int], SiteMembership] = {}

    def add(self, user_id, site_id=SITE, role=MembershipRole.WORKER, status=MembershipStatus.ACTIVE):
        self.rows[(user_id, site_id)] = SiteMembership(user_id=user_id, site_id=site_id, role=role, status=status)

    def get(self, *, user_id, site_id):
        return self.rows.get((int(user_id), int(site_id)))


class FakeReportRepo:
    def __init__(self):
        self.rows: dict[int, Report] = {}
        self._next_id = 1

    def create(self, report: NewReport) -> int:
        rid = self._next_id
        self._next_id += 1
        self.rows[rid] = Report(
            report_id=rid,
            site_id=report.site_id,
            author_id=report.author_id,
            category=report.category,
            risk_level=report.risk_level,
            review_status=ReviewStatus.PENDING,
            action_status=ActionStatus.NONE,
            is_urgent=report.is_urgent,
            location_floor=report.location_floor,
            location_zone=report.location_zone,
            content=report.content,
            created_at=report.created_at,
        )
        return rid

    def get_by_id(self, report_id):
        return self.rows.get(int(report_id))

    def has_recent_approved_duplicate(
        self, *, user_id, site_id, category, location_floor, location_zone, since, exclude_report_id
    ):
        return any(
            r.report_id != exclude_report_id
            and r.author_id == user_id
            and r.site_id == site_id
            and r.category == category
            and r.location_floor == location_floor
            and r.location_zone == location_zone
            and r.review_status == ReviewStatus.APPROVED
            and r.reviewed_at is not None
            and r.reviewed_at >= since
            for r in self.rows.values()
        )


class FakeLedger:
    """Points read side plus the shared ledger the review commit appends to."""

    def __init__(self):
        self.entries: list[PointsLedgerEntry] = []
        self.policies: dict[tuple[int, str], PointPolicy] = {}

    def append(self, entry: NewLedgerEntry) -> None:
        key = entry.dedupe_key
        if key and any(self._key(e) == key for e in self.entries):
            raise ConflictError("duplicate ledger entry")
        self.entries.append(
            PointsLedgerEntry(
                entry_id=len(self.entries) + 1,
                user_id=entry.user_id,
                site_id=entry.site_id,
                report_id=entry.report_id,
                amount=entry.amount,
                reason_code=entry.reason.value,
                settle_month=entry.settle_month,
                occurred_at=entry.occurred_at,
                created_at=entry.occurred_at,
                reason_text=entry.reason_text,
                admin_id=entry.admin_id,
            )
        )

    @staticmethod
    def _key(e: PointsLedgerEntry):
        if e.report_id is None or e.reason_code not in (
            PointsReason.REPORT_APPROVED.value,
            PointsReason.FALSE_REPORT_PENALTY.value,
        ):
            return None
        return f"{e.reason_code}:{e.report_id}"

    def seed(self, *, user_id, amount, occurred_at, report_id=None, site_id=SITE, reason=PointsReason.REPORT_APPROVED):
        self.append(
            NewLedgerEntry(
                user_id=user_id,
                site_id=site_id,
                report_id=report_id,
                amount=amount,
                reason=reason,
                occurred_at=occurred_at,
            )
        )

    def get_daily_stats(self, *, user_id, site_id, start, end):
        rows = [
            e
            for e in self.entries
            if e.user_id == user_id
            and e.site_id == site_id
            and e.reason_code == PointsReason.REPORT_APPROVED.value
            and start <= e.occurred_at < end
        ]
        return DailyStats(post_count=len(rows), total_points=sum(e.amount for e in rows))

    def get_active_policy(self, *, site_id, reason_code):
        return self.policies.get((site_id, reason_code))

    def find_entry(self, *, report_id, reason, user_id=None, site_id=None):
        for e in self.entries:
            if e.report_id != report_id or e.reason_code != reason.value:
                continue
            if user_id is not None and e.user_id != user_id:
                continue
            if site_id is not None and e.site_id != site_id:
                continue
            return e
        return None

    def get_balance(self, *, user_id, site_id=None):
        return sum(
            e.amount for e in self.entries if e.user_id == user_id and (site_id is None or e.site_id == site_id)
        )


class FakeReviewRepo:
    """Compare-and-swap over FakeReportRepo; all-or-nothing like the MySQL batch."""

    def __init__(self, reports: FakeReportRepo, ledger: FakeLedger):
        self._reports = reports
        self._ledger = ledger
        self.events: list[ReviewEvent] = []

    def commit_transition(self, commit: TransitionCommit):
        current = self._reports.rows.get(commit.report_id)
        if (
            not current
            or current.review_status != commit.expected.review_status
            or current.action_status != commit.expected.action_status
        ):
            return None

        saved_entries = list(self._ledger.entries)
        try:
            for entry in commit.ledger_entries:
                self._ledger.append(entry)
        except ConflictError:
            self._ledger.entries = saved_entries
            raise

        self._reports.rows[commit.report_id] = current.with_status(
            commit.new, reviewed_at=commit.reviewed_at, content=commit.content
        )
        ev = commit.event
        event = ReviewEvent(
            review_id=len(self.events) + 1,
            report_id=ev.report_id,
            admin_id=ev.admin_id,
            action=ev.action,
            created_at=ev.created_at,
            reason_code=ev.reason_code,
            comment=ev.comment,
        )
        self.events.append(event)
        return event

    def list_for_report(self, report_id, *, limit=200):
        rows = [e for e in self.events if e.report_id == report_id]
        rows.sort(key=lambda e: (e.created_at, e.review_id), reverse=True)
        return rows[:limit]


class FakeAttendanceRepo:
    def __init__(self):
        self.records: list[AttendanceRecord] = []

    def add(self, user_id, checkin_at, site_id=SITE):
        self.records.append(AttendanceRecord(user_id=user_id, site_id=site_id, checkin_at=checkin_at))

    def has_checkin(self, *, user_id, start, end, site_id=None):
        return any(
            r.user_id == user_id and (site_id is None or r.site_id == site_id) and start <= r.checkin_at < end
            for r in self.records
        )


class FakeManualApprovalRepo:
    def __init__(self):
        self.rows: list[ManualApproval] = []

    def exists(self, *, user_id, site_id, valid_date):
        return any(
            a.user_id == user_id and a.site_id == site_id and a.valid_date == valid_date for a in self.rows
        )

    def create(self, *, user_id, site_id, valid_date, approved_by_id, reason):
        approval = ManualApproval(
            approval_id=len(self.rows) + 1,
            user_id=user_id,
            site_id=site_id,
            valid_date=valid_date,
            approved_by_id=approved_by_id,
            reason=reason,
            created_at=NOW,
        )
        self.rows.append(approval)
        return approval


class FakeAccessPolicyRepo:
    def __init__(self):
        self.rows: dict[int, AccessPolicy] = {}

    def get(self, site_id):
        return self.rows.get(int(site_id))

    def upsert(self, policy):
        self.rows[policy.site_id] = policy
        return policy


class RecordingAuditSink:
    def __init__(self):
        self.records: list[AuditRecord] = []

    def record(self, entry):
        self.records.append(entry)


@dataclass
class World:
    users: FakeUserRepo
    memberships: FakeMembershipRepo
    reports: FakeReportRepo
    ledger: FakeLedger
    reviews: FakeReviewRepo
    attendance: FakeAttendanceRepo
    manual_approvals: FakeManualApprovalRepo
    policies: FakeAccessPolicyRepo
    flags: InMemoryFlagStore
    rate_limiter: InMemoryRateLimiter
    audit: RecordingAuditSink
    container: Container

    worker: Actor
    admin: Actor
    super_admin: Actor

    def new_report(
        self,
        *,
        author_id=None,
        category=Category.HAZARD,
        risk_level=RiskLevel.HIGH,
        floor="3F",
        zone="A",
        status=ReviewStatus.PENDING,
        action_status=ActionStatus.NONE,
        reviewed_at=None,
    ) -> Report:
        rid = self.reports.create(
            NewReport(
                site_id=SITE,
                author_id=author_id or self.worker.user_id,
                category=category,
                risk_level=risk_level,
                location_floor=floor,
                location_zone=zone,
                content="계단 난간 파손",
                is_urgent=False,
                created_at=NOW,
            )
        )
        report = replace(
            self.reports.rows[rid], review_status=status, action_status=action_status, reviewed_at=reviewed_at
        )
        self.reports.rows[rid] = report
        return report

    def check_in(self, user_id=None, at=NOW):
        self.attendance.add(user_id or self.worker.user_id, at)


def build_world(*, require_attendance_for_post: bool = False) -> World:
    users = FakeUserRepo()
    memberships = FakeMembershipRepo()
    reports = FakeReportRepo()
    ledger = FakeLedger()
    reviews = FakeReviewRepo(reports, ledger)
    attendance = FakeAttendanceRepo()
    manual_approvals = FakeManualApprovalRepo()
    policies = FakeAccessPolicyRepo()
    flags = InMemoryFlagStore()
    rate_limiter = InMemoryRateLimiter()
    audit = RecordingAuditSink()

    users.add(10, Role.WORKER)
    users.add(20, Role.SITE_ADMIN)
    users.add(99, Role.SUPER_ADMIN)
    memberships.add(10, role=MembershipRole.WORKER)
    memberships.add(20, role=MembershipRole.SITE_ADMIN)

    container = assemble(
        users_repo=users,
        memberships_repo=memberships,
        reports_repo=reports,
        reviews_repo=reviews,
        points_repo=ledger,
        attendance_repo=attendance,
        manual_approvals_repo=manual_approvals,
        access_policies_repo=policies,
        flags=flags,
        rate_limiter=rate_limiter,
        audit=audit,
        require_attendance_for_post=require_attendance_for_post,
    )
    return World(
        users=users,
        memberships=memberships,
        reports=reports,
        ledger=ledger,
        reviews=reviews,
        attendance=attendance,
        manual_approvals=manual_approvals,
        policies=policies,
        flags=flags,
        rate_limiter=rate_limiter,
        audit=audit,
        container=container,
        worker=Actor(user_id=10, role=Role.WORKER),
        admin=Actor(user_id=20, role=Role.SITE_ADMIN),
        super_admin=Actor(user_id=99, role=Role.SUPER_ADMIN),
    )


@pytest.fixture
def world() -> World:
    return build_world()

