from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from ..core.enums import PointsReason
from .model import DailyStats, PointPolicy, PointsLedgerEntry


class PointsRepository(Protocol):
    """Read side of the points ledger.

    Appends happen inside the review commit (see ReviewRepository) so the
    ledger write shares the transaction with the status update.
    """

    def get_daily_stats(self, *, user_id: int, site_id: int, start: datetime, end: datetime) -> DailyStats:
        raise NotImplementedError

    def get_active_policy(self, *, site_id: int, reason_code: str) -> Optional[PointPolicy]:
        raise NotImplementedError

    def find_entry(
        self,
        *,
        report_id: int,
        reason: PointsReason,
        user_id: Optional[int] = None,
        site_id: Optional[int] = None,
    ) -> Optional[PointsLedgerEntry]:
        raise NotImplementedError

    def get_balance(self, *, user_id: int, site_id: Optional[int] = None) -> int:
        raise NotImplementedError
