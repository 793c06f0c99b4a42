from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Protocol

from ..common.datetime_utils import now_local
from ..core.constants import FAILURE_LOCK_MINUTES, MAX_FAILED_ATTEMPTS
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_at: datetime


@dataclass(frozen=True)
class FailureResult:
    failures: int
    locked_until: Optional[datetime]


class RateLimiter(Protocol):
    def check_limit(self, key: str, limit: int, window_seconds: int) -> RateLimitResult:
        raise NotImplementedError

    def record_failure(self, key: str) -> FailureResult:
        raise NotImplementedError

    def reset_failures(self, key: str) -> None:
        raise NotImplementedError


def _next_failure(failures: int, locked_until: Optional[datetime], now: datetime) -> FailureResult:
    # An expired lock starts a fresh count.
    if locked_until is not None and locked_until <= now:
        failures = 0
    failures += 1
    new_lock = None
    if failures >= MAX_FAILED_ATTEMPTS:
        new_lock = now + timedelta(minutes=FAILURE_LOCK_MINUTES)
    return FailureResult(failures=failures, locked_until=new_lock)


class InMemoryRateLimiter(RateLimiter):
    """Fixed-window counters held by this process only.

    Expired windows and lapsed failure locks are swept at most once per
    ``sweep_seconds``.
    """

    def __init__(self, sweep_seconds: int = 60):
        self._lock = threading.Lock()
        self._windows: dict[str, tuple[int, datetime]] = {}
        self._failures: dict[str, FailureResult] = {}
        self._sweep_interval = timedelta(seconds=sweep_seconds)
        self._next_sweep: Optional[datetime] = None

    def _sweep(self, now: datetime) -> None:
        # Caller holds the lock.
        if self._next_sweep is not None and now < self._next_sweep:
            return
        self._next_sweep = now + self._sweep_interval
        for key in [k for k, (_, reset_at) in self._windows.items() if reset_at <= now]:
            del self._windows[key]
        for key in [
            k for k, f in self._failures.items() if f.locked_until is not None and f.locked_until <= now
        ]:
            del self._failures[key]

    def check_limit(self, key: str, limit: int, window_seconds: int) -> RateLimitResult:
        now = now_local()
        with self._lock:
            self._sweep(now)
            count, reset_at = self._windows.get(key, (0, now))
            if reset_at <= now:
                count, reset_at = 0, now + timedelta(seconds=window_seconds)
            if count >= limit:
                return RateLimitResult(allowed=False, remaining=0, reset_at=reset_at)
            count += 1
            self._windows[key] = (count, reset_at)
            return RateLimitResult(allowed=True, remaining=max(limit - count, 0), reset_at=reset_at)

    def record_failure(self, key: str) -> FailureResult:
        now = now_local()
        with self._lock:
            self._sweep(now)
            current = self._failures.get(key)
            result = _next_failure(
                current.failures if current else 0,
                current.locked_until if current else None,
                now,
            )
            self._failures[key] = result
            return result

    def reset_failures(self, key: str) -> None:
        with self._lock:
            self._failures.pop(key, None)


class MySQLRateLimiter(RateLimiter):
    """Counters shared by every instance, stored in MySQL."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def check_limit(self, key: str, limit: int, window_seconds: int) -> RateLimitResult:
        now = now_local()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT hit_count, reset_at FROM rate_limit_counters WHERE limit_key=%s FOR UPDATE",
                (key,),
            )
            r = fetchone(cur)
            count = int(r["hit_count"]) if r else 0
            reset_at = r["reset_at"] if r else now
            if reset_at <= now:
                count, reset_at = 0, now + timedelta(seconds=window_seconds)
            if count >= limit:
                return RateLimitResult(allowed=False, remaining=0, reset_at=reset_at)

            count += 1
            cur.execute(
                """
                INSERT INTO rate_limit_counters(limit_key, hit_count, reset_at)
                VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE hit_count=VALUES(hit_count), reset_at=VALUES(reset_at)
                """,
                (key, count, reset_at),
            )
            return RateLimitResult(allowed=True, remaining=max(limit - count, 0), reset_at=reset_at)

    def record_failure(self, key: str) -> FailureResult:
        now = now_local()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT failures, locked_until FROM rate_limit_failures WHERE limit_key=%s FOR UPDATE",
                (key,),
            )
            r = fetchone(cur)
            result = _next_failure(
                int(r["failures"]) if r else 0,
                r.get("locked_until") if r else None,
                now,
            )
            cur.execute(
                """
                INSERT INTO rate_limit_failures(limit_key, failures, locked_until)
                VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE failures=VALUES(failures), locked_until=VALUES(locked_until)
                """,
                (key, result.failures, result.locked_until),
            )
            return result

    def reset_failures(self, key: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM rate_limit_failures WHERE limit_key=%s", (key,))


class FallbackRateLimiter(RateLimiter):
    """Shared limiter first; a per-instance counter when the shared one fails.

    A broken limiter backend degrades to conservative local counting and is
    never allowed to fail or block the request.
    """

    def __init__(self, primary: RateLimiter, fallback: RateLimiter | None = None):
        self._primary = primary
        self._fallback = fallback or InMemoryRateLimiter()

    def check_limit(self, key: str, limit: int, window_seconds: int) -> RateLimitResult:
        try:
            return self._primary.check_limit(key, limit, window_seconds)
        except Exception:
            logger.warning("rate limiter unavailable, using in-memory counter key=%s", key, exc_info=True)
            return self._fallback.check_limit(key, limit, window_seconds)

    def record_failure(self, key: str) -> FailureResult:
        try:
            return self._primary.record_failure(key)
        except Exception:
            logger.warning("rate limiter unavailable, recording failure in memory key=%s", key, exc_info=True)
            return self._fallback.record_failure(key)

    def reset_failures(self, key: str) -> None:
        try:
            self._primary.reset_failures(key)
        except Exception:
            logger.warning("rate limiter unavailable, resetting in-memory failures key=%s", key, exc_info=True)
        self._fallback.reset_failures(key)
