from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import now_local
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchone
from .model import AccessPolicy, ManualApproval
from .repository import AccessPolicyRepository, AttendanceRepository, ManualApprovalRepository


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def has_checkin(self, *, user_id: int, start: datetime, end: datetime, site_id: Optional[int] = None) -> bool:
        clauses = ["user_id=%s", "checkin_at >= %s", "checkin_at < %s"]
        params: list[object] = [int(user_id), start, end]
        if site_id is not None:
            clauses.append("site_id=%s")
            params.append(int(site_id))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT attendance_id FROM attendance_records WHERE {where} LIMIT 1", tuple(params))
            return fetchone(cur) is not None


class MySQLManualApprovalRepository(ManualApprovalRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def exists(self, *, user_id: int, site_id: int, valid_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT approval_id
                FROM manual_approvals
                WHERE user_id=%s AND site_id=%s AND valid_date=%s
                LIMIT 1
                """,
                (int(user_id), int(site_id), valid_date),
            )
            return fetchone(cur) is not None

    def create(self, *, user_id: int, site_id: int, valid_date: date, approved_by_id: int, reason: str) -> ManualApproval:
        created_at = now_local()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO manual_approvals(user_id, site_id, valid_date, approved_by_id, reason, created_at)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(user_id), int(site_id), valid_date, int(approved_by_id), reason, created_at),
            )
            approval_id = int(cur.lastrowid)
        return ManualApproval(
            approval_id=approval_id,
            user_id=int(user_id),
            site_id=int(site_id),
            valid_date=valid_date,
            approved_by_id=int(approved_by_id),
            reason=reason,
            created_at=created_at,
        )


class MySQLAccessPolicyRepository(AccessPolicyRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, site_id: int) -> Optional[AccessPolicy]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT site_id, require_checkin, day_cutoff_hour FROM access_policies WHERE site_id=%s",
                (int(site_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return AccessPolicy(
                site_id=int(r["site_id"]),
                require_checkin=as_bool(r["require_checkin"]),
                day_cutoff_hour=int(r["day_cutoff_hour"]),
            )

    def upsert(self, policy: AccessPolicy) -> AccessPolicy:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO access_policies(site_id, require_checkin, day_cutoff_hour)
                VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    require_checkin=VALUES(require_checkin),
                    day_cutoff_hour=VALUES(day_cutoff_hour)
                """,
                (int(policy.site_id), int(policy.require_checkin), int(policy.day_cutoff_hour)),
            )
        return policy
