from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from ..common.datetime_utils import day_range, now_local
from ..core.constants import (
    DAILY_POINT_CAP,
    DAILY_POST_LIMIT,
    DUPLICATE_WINDOW_HOURS,
    FALSE_REPORT_PENALTY_MULTIPLIER,
)
from ..core.enums import BlockReason, Category, PointsReason, RiskLevel
from ..reports.repository import ReportRepository
from .model import ApprovalPoints, FalseReportPenalty
from .repository import PointsRepository

# Site defaults; an active PointPolicy keyed by the category name overrides them.
DEFAULT_BASE_POINTS: dict[Category, int] = {
    Category.HAZARD: 10,
    Category.UNSAFE_BEHAVIOR: 8,
    Category.INCONVENIENCE: 5,
    Category.SUGGESTION: 7,
    Category.BEST_PRACTICE: 10,
}

RISK_BONUS: dict[Optional[RiskLevel], int] = {
    RiskLevel.HIGH: 5,
    RiskLevel.MEDIUM: 3,
    RiskLevel.LOW: 0,
    None: 0,
}


class PointsEngine:
    """Computes approval awards and false-report penalties.

    Read-only: the engine never writes the ledger. Business blocks (duplicate,
    daily caps) come back as data so the review itself can still succeed.
    """

    def __init__(
        self,
        points: PointsRepository,
        reports: ReportRepository,
        *,
        daily_point_cap: int = DAILY_POINT_CAP,
        daily_post_limit: int = DAILY_POST_LIMIT,
    ):
        self._points = points
        self._reports = reports
        self._daily_point_cap = int(daily_point_cap)
        self._daily_post_limit = int(daily_post_limit)

    def calculate_approval_points(
        self,
        *,
        user_id: int,
        site_id: int,
        report_id: int,
        category: Category,
        risk_level: Optional[RiskLevel],
        location_floor: Optional[str],
        location_zone: Optional[str],
        now: datetime | None = None,
    ) -> ApprovalPoints:
        now = now or now_local()

        is_duplicate = self._reports.has_recent_approved_duplicate(
            user_id=user_id,
            site_id=site_id,
            category=category,
            location_floor=location_floor,
            location_zone=location_zone,
            since=now - timedelta(hours=DUPLICATE_WINDOW_HOURS),
            exclude_report_id=report_id,
        )
        if is_duplicate:
            return self._blocked(BlockReason.DUPLICATE_WITHIN_24H, "24시간 내 동일 위치·유형 중복 제보")

        # Fresh aggregate read; two concurrent approvals may both pass this check.
        start, end = day_range(now.date())
        stats = self._points.get_daily_stats(user_id=user_id, site_id=site_id, start=start, end=end)
        if stats.post_count >= self._daily_post_limit:
            return self._blocked(
                BlockReason.DAILY_POST_LIMIT,
                f"일일 승인 한도 초과 ({stats.post_count}/{self._daily_post_limit}건)",
            )
        remaining = self._daily_point_cap - stats.total_points
        if remaining <= 0:
            return self._blocked(
                BlockReason.DAILY_POINT_LIMIT,
                f"일일 포인트 한도 초과 ({stats.total_points}/{self._daily_point_cap}점)",
            )

        base_points = self._base_points(site_id=site_id, category=category)
        risk_bonus = RISK_BONUS.get(risk_level, 0)
        uncapped = base_points + risk_bonus
        total = min(uncapped, remaining)

        breakdown = f"기본 {base_points}점"
        if risk_bonus:
            breakdown += f" + 위험도 보너스 {risk_bonus}점"
        if total < uncapped:
            breakdown += f" (일일 한도 적용: {total}점)"

        return ApprovalPoints(
            blocked=False,
            base_points=base_points,
            risk_bonus=risk_bonus,
            total_points=total,
            breakdown=breakdown,
        )

    def calculate_false_report_penalty(self, *, user_id: int, site_id: int, report_id: int) -> FalseReportPenalty:
        """Claw back FALSE_REPORT_PENALTY_MULTIPLIER times the original award.

        With no original REPORT_APPROVED entry the penalty is 0, not an error.
        """
        original = self._points.find_entry(
            report_id=report_id,
            reason=PointsReason.REPORT_APPROVED,
            user_id=user_id,
            site_id=site_id,
        )
        original_amount = original.amount if original else 0
        penalty = -FALSE_REPORT_PENALTY_MULTIPLIER * original_amount
        return FalseReportPenalty(
            penalty_amount=penalty,
            original_amount=original_amount,
            breakdown=f"허위 제보 패널티: 원 지급 {original_amount}점 × {FALSE_REPORT_PENALTY_MULTIPLIER} = {penalty}점",
        )

    def _base_points(self, *, site_id: int, category: Category) -> int:
        policy = self._points.get_active_policy(site_id=site_id, reason_code=category.value)
        if policy and policy.is_active:
            return int(policy.default_amount)
        return DEFAULT_BASE_POINTS[category]

    @staticmethod
    def _blocked(reason: BlockReason, breakdown: str) -> ApprovalPoints:
        return ApprovalPoints(
            blocked=True,
            block_reason=reason,
            base_points=0,
            risk_bonus=0,
            total_points=0,
            breakdown=breakdown,
        )
