from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..core.enums import ActionStatus, Category, ReviewStatus, RiskLevel
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchone
from .model import NewReport, Report
from .repository import ReportRepository

REPORT_COLUMNS = """
    report_id, site_id, author_id, category, risk_level, review_status,
    action_status, is_urgent, location_floor, location_zone, content,
    created_at, reviewed_at
"""


def row_to_report(r: dict) -> Report:
    return Report(
        report_id=int(r["report_id"]),
        site_id=int(r["site_id"]),
        author_id=int(r["author_id"]),
        category=Category(r["category"]),
        risk_level=RiskLevel(r["risk_level"]) if r.get("risk_level") else None,
        review_status=ReviewStatus(r["review_status"]),
        action_status=ActionStatus(r["action_status"]),
        is_urgent=as_bool(r.get("is_urgent")),
        location_floor=r.get("location_floor"),
        location_zone=r.get("location_zone"),
        content=r.get("content") or "",
        created_at=r["created_at"],
        reviewed_at=r.get("reviewed_at"),
    )


class MySQLReportRepository(ReportRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, report_id: int) -> Optional[Report]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {REPORT_COLUMNS} FROM reports WHERE report_id=%s",
                (int(report_id),),
            )
            r = fetchone(cur)
            return row_to_report(r) if r else None

    def create(self, report: NewReport) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO reports(
                    site_id, author_id, category, risk_level, review_status, action_status,
                    is_urgent, location_floor, location_zone, content, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(report.site_id),
                    int(report.author_id),
                    report.category.value,
                    report.risk_level.value if report.risk_level else None,
                    ReviewStatus.PENDING.value,
                    ActionStatus.NONE.value,
                    int(report.is_urgent),
                    report.location_floor,
                    report.location_zone,
                    report.content,
                    report.created_at,
                ),
            )
            return int(cur.lastrowid)

    def has_recent_approved_duplicate(
        self,
        *,
        user_id: int,
        site_id: int,
        category: Category,
        location_floor: Optional[str],
        location_zone: Optional[str],
        since: datetime,
        exclude_report_id: int,
    ) -> bool:
        # NULL-safe equality (<=>) so reports without a floor/zone still match each other.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT report_id
                FROM reports
                WHERE author_id=%s AND site_id=%s AND category=%s
                  AND location_floor <=> %s AND location_zone <=> %s
                  AND review_status=%s AND reviewed_at >= %s
                  AND report_id <> %s
                LIMIT 1
                """,
                (
                    int(user_id),
                    int(site_id),
                    category.value,
                    location_floor,
                    location_zone,
                    ReviewStatus.APPROVED.value,
                    since,
                    int(exclude_report_id),
                ),
            )
            return fetchone(cur) is not None
