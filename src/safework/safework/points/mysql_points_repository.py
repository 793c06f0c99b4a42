from __future__ import annotations

from datetime import datetime
from typing import Optional

from mysql.connector import errors as mysql_errors

from ..core.enums import PointsReason
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchone
from .model import DailyStats, NewLedgerEntry, PointPolicy, PointsLedgerEntry
from .repository import PointsRepository


def insert_ledger_entry(cur, entry: NewLedgerEntry) -> int:
    """Append one ledger row on an open cursor (caller owns the transaction)."""
    try:
        cur.execute(
            """
            INSERT INTO points_ledger(
                user_id, site_id, report_id, amount, reason_code, reason_text,
                admin_id, settle_month, dedupe_key, occurred_at
            )
            VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
            """,
            (
                int(entry.user_id),
                int(entry.site_id),
                entry.report_id,
                int(entry.amount),
                entry.reason.value,
                entry.reason_text,
                entry.admin_id,
                entry.settle_month,
                entry.dedupe_key,
                entry.occurred_at,
            ),
        )
    except mysql_errors.IntegrityError:
        raise ConflictError("이미 처리된 포인트 내역입니다")
    return int(cur.lastrowid)


class MySQLPointsRepository(PointsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_daily_stats(self, *, user_id: int, site_id: int, start: datetime, end: datetime) -> DailyStats:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS post_count, COALESCE(SUM(amount), 0) AS total_points
                FROM points_ledger
                WHERE user_id=%s AND site_id=%s AND reason_code=%s
                  AND occurred_at >= %s AND occurred_at < %s
                """,
                (int(user_id), int(site_id), PointsReason.REPORT_APPROVED.value, start, end),
            )
            r = fetchone(cur) or {}
            return DailyStats(
                post_count=int(r.get("post_count") or 0),
                total_points=int(r.get("total_points") or 0),
            )

    def get_active_policy(self, *, site_id: int, reason_code: str) -> Optional[PointPolicy]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT site_id, reason_code, default_amount, is_active
                FROM point_policies
                WHERE site_id=%s AND reason_code=%s AND is_active=1
                LIMIT 1
                """,
                (int(site_id), reason_code),
            )
            r = fetchone(cur)
            if not r:
                return None
            return PointPolicy(
                site_id=int(r["site_id"]),
                reason_code=r["reason_code"],
                default_amount=int(r["default_amount"]),
                is_active=as_bool(r["is_active"]),
            )

    def find_entry(
        self,
        *,
        report_id: int,
        reason: PointsReason,
        user_id: Optional[int] = None,
        site_id: Optional[int] = None,
    ) -> Optional[PointsLedgerEntry]:
        clauses = ["report_id=%s", "reason_code=%s"]
        params: list[object] = [int(report_id), reason.value]
        if user_id is not None:
            clauses.append("user_id=%s")
            params.append(int(user_id))
        if site_id is not None:
            clauses.append("site_id=%s")
            params.append(int(site_id))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT entry_id, user_id, site_id, report_id, amount, reason_code, reason_text,
                       admin_id, settle_month, occurred_at, created_at
                FROM points_ledger
                WHERE {where}
                ORDER BY entry_id ASC
                LIMIT 1
                """,
                tuple(params),
            )
            r = fetchone(cur)
            if not r:
                return None
            return PointsLedgerEntry(
                entry_id=int(r["entry_id"]),
                user_id=int(r["user_id"]),
                site_id=int(r["site_id"]),
                report_id=r.get("report_id"),
                amount=int(r["amount"]),
                reason_code=r["reason_code"],
                settle_month=r["settle_month"],
                occurred_at=r["occurred_at"],
                created_at=r["created_at"],
                reason_text=r.get("reason_text"),
                admin_id=r.get("admin_id"),
            )

    def get_balance(self, *, user_id: int, site_id: Optional[int] = None) -> int:
        sql = "SELECT COALESCE(SUM(amount), 0) AS balance FROM points_ledger WHERE user_id=%s"
        params: list[object] = [int(user_id)]
        if site_id is not None:
            sql += " AND site_id=%s"
            params.append(int(site_id))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            r = fetchone(cur) or {}
            return int(r.get("balance") or 0)
