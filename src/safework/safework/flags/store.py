from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional, Protocol

from ..common.datetime_utils import now_local
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone


class FlagStore(Protocol):
    """KV-like store for shared, eventually-consistent flags."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def put(self, key: str, value: str, *, ttl_seconds: Optional[int] = None) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class InMemoryFlagStore(FlagStore):
    """Per-process flag store (tests, single-instance deployments)."""

    def __init__(self):
        self._values: dict[str, tuple[str, Optional[datetime]]] = {}

    def get(self, key: str) -> Optional[str]:
        item = self._values.get(key)
        if not item:
            return None
        value, expires_at = item
        if expires_at is not None and expires_at <= now_local():
            self._values.pop(key, None)
            return None
        return value

    def put(self, key: str, value: str, *, ttl_seconds: Optional[int] = None) -> None:
        expires_at = now_local() + timedelta(seconds=ttl_seconds) if ttl_seconds else None
        self._values[key] = (value, expires_at)

    def delete(self, key: str) -> None:
        self._values.pop(key, None)


class MySQLFlagStore(FlagStore):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, key: str) -> Optional[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT flag_value
                FROM kv_flags
                WHERE flag_key=%s AND (expires_at IS NULL OR expires_at > %s)
                """,
                (key, now_local()),
            )
            r = fetchone(cur)
            return r["flag_value"] if r else None

    def put(self, key: str, value: str, *, ttl_seconds: Optional[int] = None) -> None:
        expires_at = now_local() + timedelta(seconds=ttl_seconds) if ttl_seconds else None
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO kv_flags(flag_key, flag_value, expires_at)
                VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE flag_value=VALUES(flag_value), expires_at=VALUES(expires_at)
                """,
                (key, value, expires_at),
            )

    def delete(self, key: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM kv_flags WHERE flag_key=%s", (key,))
