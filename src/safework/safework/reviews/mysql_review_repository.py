from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import ReviewAction
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from ..points.mysql_points_repository import insert_ledger_entry
from .model import ReviewEvent, TransitionCommit
from .repository import ReviewRepository


class _Conflict(Exception):
    """Aborts the batch so db_cursor rolls it back."""


class MySQLReviewRepository(ReviewRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def commit_transition(self, commit: TransitionCommit) -> Optional[ReviewEvent]:
        event = commit.event
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    UPDATE reports
                    SET review_status=%s, action_status=%s, is_urgent=%s,
                        reviewed_at=COALESCE(%s, reviewed_at),
                        content=COALESCE(%s, content)
                    WHERE report_id=%s AND review_status=%s AND action_status=%s
                    """,
                    (
                        commit.new.review_status.value,
                        commit.new.action_status.value,
                        int(commit.new.is_urgent),
                        commit.reviewed_at,
                        commit.content,
                        int(commit.report_id),
                        commit.expected.review_status.value,
                        commit.expected.action_status.value,
                    ),
                )
                if cur.rowcount == 0:
                    raise _Conflict()

                cur.execute(
                    """
                    INSERT INTO review_events(report_id, admin_id, action, reason_code, comment, created_at)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(event.report_id),
                        int(event.admin_id),
                        event.action.value,
                        event.reason_code,
                        event.comment,
                        event.created_at,
                    ),
                )
                review_id = int(cur.lastrowid)

                for entry in commit.ledger_entries:
                    insert_ledger_entry(cur, entry)
        except _Conflict:
            return None

        return ReviewEvent(
            review_id=review_id,
            report_id=event.report_id,
            admin_id=event.admin_id,
            action=event.action,
            created_at=event.created_at,
            reason_code=event.reason_code,
            comment=event.comment,
        )

    def list_for_report(self, report_id: int, *, limit: int = 200) -> Sequence[ReviewEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT review_id, report_id, admin_id, action, reason_code, comment, created_at
                FROM review_events
                WHERE report_id=%s
                ORDER BY created_at DESC, review_id DESC
                LIMIT %s
                """,
                (int(report_id), int(limit)),
            )
            return [
                ReviewEvent(
                    review_id=int(r["review_id"]),
                    report_id=int(r["report_id"]),
                    admin_id=int(r["admin_id"]),
                    action=ReviewAction(r["action"]),
                    created_at=r["created_at"],
                    reason_code=r.get("reason_code"),
                    comment=r.get("comment"),
                )
                for r in fetchall(cur)
            ]
