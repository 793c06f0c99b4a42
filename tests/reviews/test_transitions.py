from __future__ import annotations

import itertools

import pytest

from src.safework.safework.core.enums import ActionStatus, ReviewAction, ReviewStatus
from src.safework.safework.core.exceptions import InvalidTransitionError
from src.safework.safework.reports.model import StatusSnapshot
from src.safework.safework.reviews.transitions import can_transition, next_status

OPEN = {ReviewStatus.PENDING, ReviewStatus.IN_REVIEW, ReviewStatus.NEED_INFO, ReviewStatus.URGENT}

LEGAL = {
    ReviewAction.APPROVE: lambda rs, acs: rs in OPEN,
    ReviewAction.REJECT: lambda rs, acs: rs in OPEN,
    ReviewAction.REQUEST_MORE: lambda rs, acs: rs in {ReviewStatus.PENDING, ReviewStatus.IN_REVIEW},
    ReviewAction.MARK_URGENT: lambda rs, acs: rs
    in {ReviewStatus.PENDING, ReviewStatus.IN_REVIEW, ReviewStatus.NEED_INFO},
    ReviewAction.RESUBMIT: lambda rs, acs: rs == ReviewStatus.NEED_INFO,
    ReviewAction.ASSIGN: lambda rs, acs: rs == ReviewStatus.APPROVED
    and acs in {ActionStatus.NONE, ActionStatus.OVERDUE},
    ReviewAction.CLOSE: lambda rs, acs: rs == ReviewStatus.APPROVED
    and acs in {ActionStatus.ASSIGNED, ActionStatus.IN_PROGRESS, ActionStatus.COMPLETED, ActionStatus.OVERDUE},
}


def test_table_covers_every_action():
    assert set(LEGAL) == set(ReviewAction)


@pytest.mark.parametrize(
    "review_status,action_status,action",
    list(itertools.product(ReviewStatus, ActionStatus, ReviewAction)),
)
def test_every_pair_matches_table(review_status, action_status, action):
    current = StatusSnapshot(review_status, action_status, False)
    expected = LEGAL[action](review_status, action_status)

    assert can_transition(current, action) is expected
    if not expected:
        with pytest.raises(InvalidTransitionError):
            next_status(current, action)


def test_terminal_states_refuse_decisions():
    for status in (ReviewStatus.APPROVED, ReviewStatus.REJECTED):
        for action in (ReviewAction.APPROVE, ReviewAction.REJECT, ReviewAction.REQUEST_MORE, ReviewAction.MARK_URGENT):
            with pytest.raises(InvalidTransitionError):
                next_status(StatusSnapshot(status, ActionStatus.NONE, False), action)


def test_results():
    pending = StatusSnapshot(ReviewStatus.PENDING, ActionStatus.NONE, False)
    assert next_status(pending, ReviewAction.APPROVE).review_status == ReviewStatus.APPROVED
    assert next_status(pending, ReviewAction.REJECT).review_status == ReviewStatus.REJECTED
    assert next_status(pending, ReviewAction.REQUEST_MORE).review_status == ReviewStatus.NEED_INFO

    urgent = next_status(pending, ReviewAction.MARK_URGENT)
    assert urgent.review_status == ReviewStatus.URGENT
    assert urgent.is_urgent is True

    need_info = StatusSnapshot(ReviewStatus.NEED_INFO, ActionStatus.NONE, False)
    assert next_status(need_info, ReviewAction.RESUBMIT).review_status == ReviewStatus.PENDING

    approved = StatusSnapshot(ReviewStatus.APPROVED, ActionStatus.NONE, True)
    assigned = next_status(approved, ReviewAction.ASSIGN)
    assert assigned == StatusSnapshot(ReviewStatus.APPROVED, ActionStatus.ASSIGNED, True)
    assert next_status(assigned, ReviewAction.CLOSE).action_status == ActionStatus.VERIFIED
