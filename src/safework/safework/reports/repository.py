from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from ..core.enums import Category
from .model import NewReport, Report


class ReportRepository(Protocol):
    def get_by_id(self, report_id: int) -> Optional[Report]:
        raise NotImplementedError

    def create(self, report: NewReport) -> int:
        raise NotImplementedError

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
        """True when another report with the same location/category was approved since ``since``."""

        raise NotImplementedError
