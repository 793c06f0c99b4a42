from __future__ import annotations

from datetime import date, datetime

import pytest

from src.safework.safework.core.constants import FAS_STATUS_KEY
from src.safework.safework.core.exceptions import AuthorizationError, NotFoundError, ValidationError

NOW = datetime(2026, 3, 10, 14, 0, 0)


def test_policy_defaults_when_site_has_none(world):
    policy = world.container.access_policy_service.get_policy(1)

    assert policy.require_checkin is True
    assert policy.day_cutoff_hour == 5
    assert policy.to_dict() == {"siteId": 1, "requireCheckin": True, "dayCutoffHour": 5}


def test_partial_update_keeps_other_field(world):
    svc = world.container.access_policy_service

    svc.update_policy(actor=world.admin, site_id=1, day_cutoff_hour=0)
    policy = svc.update_policy(actor=world.admin, site_id=1, require_checkin=False)

    assert policy.require_checkin is False
    assert policy.day_cutoff_hour == 0
    assert world.policies.get(1) == policy
    assert [r.action for r in world.audit.records] == ["ACCESS_POLICY_UPDATED", "ACCESS_POLICY_UPDATED"]


@pytest.mark.parametrize("hour", [-1, 24, "5", 5.5, True])
def test_cutoff_hour_must_be_integer_hour(world, hour):
    with pytest.raises(ValidationError):
        world.container.access_policy_service.update_policy(actor=world.admin, site_id=1, day_cutoff_hour=hour)
    assert world.policies.get(1) is None


def test_require_checkin_must_be_boolean(world):
    with pytest.raises(ValidationError):
        world.container.access_policy_service.update_policy(actor=world.admin, site_id=1, require_checkin="no")


def test_boundary_hours_accepted(world):
    svc = world.container.access_policy_service

    assert svc.update_policy(actor=world.admin, site_id=1, day_cutoff_hour=0).day_cutoff_hour == 0
    assert svc.update_policy(actor=world.admin, site_id=1, day_cutoff_hour=23).day_cutoff_hour == 23


def test_workers_cannot_change_policy(world):
    with pytest.raises(AuthorizationError):
        world.container.access_policy_service.update_policy(actor=world.worker, site_id=1, require_checkin=False)


def test_grant_manual_approval_defaults_to_current_attendance_day(world):
    approval = world.container.manual_approval_service.grant(
        actor=world.admin, user_id=10, site_id=1, reason="지문 인식기 고장", now=datetime(2026, 3, 11, 2, 0)
    )

    assert approval.valid_date == date(2026, 3, 10)
    assert approval.approved_by_id == 20
    assert world.manual_approvals.exists(user_id=10, site_id=1, valid_date=date(2026, 3, 10))
    (audit,) = world.audit.records
    assert audit.action == "MANUAL_APPROVAL_CREATED"
    assert audit.target_id == approval.approval_id


def test_grant_with_explicit_date(world):
    approval = world.container.manual_approval_service.grant(
        actor=world.super_admin, user_id=10, site_id=1, reason="출장", valid_date=date(2026, 3, 12)
    )

    assert approval.valid_date == date(2026, 3, 12)


def test_grant_validation(world):
    svc = world.container.manual_approval_service

    with pytest.raises(ValidationError):
        svc.grant(actor=world.admin, user_id=10, site_id=1, reason="  ", now=NOW)
    with pytest.raises(NotFoundError):
        svc.grant(actor=world.admin, user_id=404, site_id=1, reason="사유", now=NOW)
    with pytest.raises(AuthorizationError):
        svc.grant(actor=world.worker, user_id=10, site_id=1, reason="사유", now=NOW)

    assert world.manual_approvals.rows == []
    assert world.audit.records == []


def test_fas_status_flag(world):
    fas = world.container.fas_status_service

    assert fas.is_down() is False
    fas.mark_down(ttl_seconds=300)
    assert fas.is_down() is True
    assert world.flags.get(FAS_STATUS_KEY) == "down"
    fas.mark_up()
    assert fas.is_down() is False
