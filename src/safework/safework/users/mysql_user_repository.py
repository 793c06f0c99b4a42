from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..core.enums import MembershipRole, MembershipStatus, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchone
from .model import SiteMembership, User
from .repository import MembershipRepository, UserRepository


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, name, role, is_active, false_report_count, restricted_until
                FROM users
                WHERE user_id=%s
                """,
                (int(user_id),),
            )
            row = fetchone(cur)
            if not row:
                return None
            return User(
                user_id=int(row["user_id"]),
                name=row["name"],
                role=Role(row["role"]),
                is_active=as_bool(row.get("is_active", True)),
                false_report_count=int(row.get("false_report_count") or 0),
                restricted_until=row.get("restricted_until"),
            )

    def record_false_report(self, user_id: int, *, restricted_until: Optional[datetime]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE users
                SET false_report_count = false_report_count + 1,
                    restricted_until = COALESCE(%s, restricted_until)
                WHERE user_id=%s
                """,
                (restricted_until, int(user_id)),
            )
            return cur.rowcount > 0


class MySQLMembershipRepository(MembershipRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, *, user_id: int, site_id: int) -> Optional[SiteMembership]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, site_id, role, status
                FROM site_memberships
                WHERE user_id=%s AND site_id=%s
                """,
                (int(user_id), int(site_id)),
            )
            row = fetchone(cur)
            if not row:
                return None
            return SiteMembership(
                user_id=int(row["user_id"]),
                site_id=int(row["site_id"]),
                role=MembershipRole(row["role"]),
                status=MembershipStatus(row["status"]),
            )
