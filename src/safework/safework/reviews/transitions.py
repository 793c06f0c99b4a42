"""Review transition table.

Pure functions only: nothing here reads or writes storage, so an illegal
(status, action) pair is refused before any side effect is attempted.
"""

from __future__ import annotations

from ..core.enums import ActionStatus, ReviewAction, ReviewStatus
from ..core.exceptions import InvalidTransitionError
from ..reports.model import StatusSnapshot

_OPEN_FOR_DECISION = frozenset(
    {ReviewStatus.PENDING, ReviewStatus.IN_REVIEW, ReviewStatus.NEED_INFO, ReviewStatus.URGENT}
)

REVIEW_SOURCES: dict[ReviewAction, frozenset[ReviewStatus]] = {
    ReviewAction.APPROVE: _OPEN_FOR_DECISION,
    ReviewAction.REJECT: _OPEN_FOR_DECISION,
    ReviewAction.REQUEST_MORE: frozenset({ReviewStatus.PENDING, ReviewStatus.IN_REVIEW}),
    ReviewAction.MARK_URGENT: frozenset({ReviewStatus.PENDING, ReviewStatus.IN_REVIEW, ReviewStatus.NEED_INFO}),
    ReviewAction.RESUBMIT: frozenset({ReviewStatus.NEED_INFO}),
    ReviewAction.ASSIGN: frozenset({ReviewStatus.APPROVED}),
    ReviewAction.CLOSE: frozenset({ReviewStatus.APPROVED}),
}

# ASSIGN/CLOSE move the follow-up action status, not the review status.
ACTION_SOURCES: dict[ReviewAction, frozenset[ActionStatus]] = {
    ReviewAction.ASSIGN: frozenset({ActionStatus.NONE, ActionStatus.OVERDUE}),
    ReviewAction.CLOSE: frozenset(
        {ActionStatus.ASSIGNED, ActionStatus.IN_PROGRESS, ActionStatus.COMPLETED, ActionStatus.OVERDUE}
    ),
}

ADMIN_ACTIONS = frozenset(
    {
        ReviewAction.APPROVE,
        ReviewAction.REJECT,
        ReviewAction.REQUEST_MORE,
        ReviewAction.MARK_URGENT,
        ReviewAction.ASSIGN,
        ReviewAction.CLOSE,
    }
)


def can_transition(current: StatusSnapshot, action: ReviewAction) -> bool:
    if current.review_status not in REVIEW_SOURCES[action]:
        return False
    action_sources = ACTION_SOURCES.get(action)
    return action_sources is None or current.action_status in action_sources


def next_status(current: StatusSnapshot, action: ReviewAction) -> StatusSnapshot:
    """Resulting status for ``action`` or InvalidTransitionError."""
    if not can_transition(current, action):
        raise InvalidTransitionError(
            f"현재 상태({current.review_status.value}/{current.action_status.value})에서 "
            f"{action.value} 액션을 수행할 수 없습니다"
        )

    if action == ReviewAction.APPROVE:
        return StatusSnapshot(ReviewStatus.APPROVED, current.action_status, current.is_urgent)
    if action == ReviewAction.REJECT:
        return StatusSnapshot(ReviewStatus.REJECTED, current.action_status, current.is_urgent)
    if action == ReviewAction.REQUEST_MORE:
        return StatusSnapshot(ReviewStatus.NEED_INFO, current.action_status, current.is_urgent)
    if action == ReviewAction.MARK_URGENT:
        return StatusSnapshot(ReviewStatus.URGENT, current.action_status, True)
    if action == ReviewAction.RESUBMIT:
        return StatusSnapshot(ReviewStatus.PENDING, current.action_status, current.is_urgent)
    if action == ReviewAction.ASSIGN:
        return StatusSnapshot(current.review_status, ActionStatus.ASSIGNED, current.is_urgent)
    if action == ReviewAction.CLOSE:
        return StatusSnapshot(current.review_status, ActionStatus.VERIFIED, current.is_urgent)
    raise InvalidTransitionError(f"알 수 없는 액션: {action}")
