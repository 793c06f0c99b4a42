from __future__ import annotations

from datetime import date, datetime, time, timedelta


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def day_range(day: date, *, cutoff_hour: int = 0) -> tuple[datetime, datetime]:
    """Half-open [start, end) range of a business day starting at ``cutoff_hour``."""
    start = datetime.combine(day, time(hour=cutoff_hour))
    return start, start + timedelta(days=1)


def attendance_day(now: datetime, *, cutoff_hour: int) -> date:
    """The attendance day ``now`` belongs to.

    The attendance day rolls over at ``cutoff_hour`` instead of midnight, so a
    night shift checking in at 01:00 still counts for the previous day.
    """
    if now.hour < cutoff_hour:
        return (now - timedelta(days=1)).date()
    return now.date()


def settle_month(moment: datetime) -> str:
    """Settlement bucket ("YYYY-MM") for a ledger entry."""
    return moment.strftime("%Y-%m")
