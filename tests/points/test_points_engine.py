from __future__ import annotations

from datetime import datetime, timedelta

from src.safework.safework.core.enums import BlockReason, Category, PointsReason, ReviewStatus, RiskLevel
from src.safework.safework.points.model import PointPolicy

NOW = datetime(2026, 3, 10, 14, 0, 0)


def _calc(world, report, now=NOW):
    return world.container.points_engine.calculate_approval_points(
        user_id=report.author_id,
        site_id=report.site_id,
        report_id=report.report_id,
        category=report.category,
        risk_level=report.risk_level,
        location_floor=report.location_floor,
        location_zone=report.location_zone,
        now=now,
    )


def test_hazard_high_gets_base_plus_bonus(world):
    report = world.new_report(category=Category.HAZARD, risk_level=RiskLevel.HIGH)

    out = _calc(world, report)

    assert out.blocked is False
    assert (out.base_points, out.risk_bonus, out.total_points) == (10, 5, 15)
    assert out.breakdown == "기본 10점 + 위험도 보너스 5점"


def test_category_defaults_and_low_risk_without_bonus(world):
    expected = {
        Category.HAZARD: 10,
        Category.UNSAFE_BEHAVIOR: 8,
        Category.INCONVENIENCE: 5,
        Category.SUGGESTION: 7,
        Category.BEST_PRACTICE: 10,
    }
    for category, base in expected.items():
        report = world.new_report(category=category, risk_level=RiskLevel.LOW, zone=category.value)
        out = _calc(world, report)
        assert out.total_points == base
        assert out.breakdown == f"기본 {base}점"


def test_medium_and_missing_risk_level(world):
    medium = world.new_report(category=Category.SUGGESTION, risk_level=RiskLevel.MEDIUM)
    assert _calc(world, medium).total_points == 10

    unrated = world.new_report(category=Category.SUGGESTION, risk_level=None, zone="B")
    assert _calc(world, unrated).total_points == 7


def test_total_capped_at_remaining_daily_points(world):
    world.ledger.seed(user_id=10, amount=15, occurred_at=NOW - timedelta(hours=3), report_id=101)
    world.ledger.seed(user_id=10, amount=13, occurred_at=NOW - timedelta(hours=2), report_id=102)
    report = world.new_report()

    out = _calc(world, report)

    assert out.blocked is False
    assert out.total_points == 2
    assert out.breakdown == "기본 10점 + 위험도 보너스 5점 (일일 한도 적용: 2점)"


def test_blocked_when_daily_points_used_up(world):
    world.ledger.seed(user_id=10, amount=15, occurred_at=NOW - timedelta(hours=3), report_id=101)
    world.ledger.seed(user_id=10, amount=15, occurred_at=NOW - timedelta(hours=2), report_id=102)

    out = _calc(world, world.new_report())

    assert out.blocked is True
    assert out.block_reason == BlockReason.DAILY_POINT_LIMIT
    assert out.total_points == 0


def test_blocked_after_three_approvals_today(world):
    for rid in (101, 102, 103):
        world.ledger.seed(user_id=10, amount=5, occurred_at=NOW - timedelta(hours=1), report_id=rid)

    out = _calc(world, world.new_report())

    assert out.blocked is True
    assert out.block_reason == BlockReason.DAILY_POST_LIMIT


def test_yesterday_and_other_reasons_do_not_count(world):
    yesterday = NOW - timedelta(days=1)
    for rid in (101, 102, 103):
        world.ledger.seed(user_id=10, amount=10, occurred_at=yesterday, report_id=rid)
    world.ledger.seed(
        user_id=10, amount=2, occurred_at=NOW, report_id=104, reason=PointsReason.RESUBMIT_BONUS
    )

    out = _calc(world, world.new_report())

    assert out.blocked is False
    assert out.total_points == 15


def test_duplicate_location_within_24h_is_blocked(world):
    world.new_report(status=ReviewStatus.APPROVED, reviewed_at=NOW - timedelta(hours=2))
    report = world.new_report()

    out = _calc(world, report)

    assert out.blocked is True
    assert out.block_reason == BlockReason.DUPLICATE_WITHIN_24H
    assert out.total_points == 0


def test_older_or_different_location_is_not_duplicate(world):
    world.new_report(status=ReviewStatus.APPROVED, reviewed_at=NOW - timedelta(hours=25))
    world.new_report(status=ReviewStatus.APPROVED, reviewed_at=NOW - timedelta(hours=1), zone="B")
    world.new_report(status=ReviewStatus.REJECTED, reviewed_at=NOW - timedelta(hours=1))

    assert _calc(world, world.new_report()).blocked is False


def test_active_site_policy_overrides_base(world):
    world.ledger.policies[(1, "HAZARD")] = PointPolicy(site_id=1, reason_code="HAZARD", default_amount=20)

    out = _calc(world, world.new_report())

    assert out.base_points == 20
    assert out.total_points == 25


def test_inactive_policy_is_ignored(world):
    world.ledger.policies[(1, "HAZARD")] = PointPolicy(
        site_id=1, reason_code="HAZARD", default_amount=20, is_active=False
    )

    assert _calc(world, world.new_report()).base_points == 10


def test_false_report_penalty_doubles_original_award(world):
    report = world.new_report()
    world.ledger.seed(user_id=10, amount=15, occurred_at=NOW, report_id=report.report_id)

    out = world.container.points_engine.calculate_false_report_penalty(
        user_id=10, site_id=1, report_id=report.report_id
    )

    assert out.original_amount == 15
    assert out.penalty_amount == -30


def test_false_report_penalty_is_zero_without_award(world):
    report = world.new_report()

    out = world.container.points_engine.calculate_false_report_penalty(
        user_id=10, site_id=1, report_id=report.report_id
    )

    assert out.penalty_amount == 0
    assert out.original_amount == 0
