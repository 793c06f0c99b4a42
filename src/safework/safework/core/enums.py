from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Global user role used for authorization."""

    WORKER = "WORKER"
    SITE_ADMIN = "SITE_ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"
    SYSTEM = "SYSTEM"


class MembershipRole(str, Enum):
    WORKER = "WORKER"
    MANAGER = "MANAGER"
    SITE_ADMIN = "SITE_ADMIN"


class MembershipStatus(str, Enum):
    ACTIVE = "ACTIVE"
    PENDING = "PENDING"
    LEFT = "LEFT"


class Category(str, Enum):
    HAZARD = "HAZARD"
    UNSAFE_BEHAVIOR = "UNSAFE_BEHAVIOR"
    INCONVENIENCE = "INCONVENIENCE"
    SUGGESTION = "SUGGESTION"
    BEST_PRACTICE = "BEST_PRACTICE"


class RiskLevel(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class ReviewStatus(str, Enum):
    """Review workflow state of a report."""

    PENDING = "PENDING"
    IN_REVIEW = "IN_REVIEW"
    NEED_INFO = "NEED_INFO"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    URGENT = "URGENT"

    @property
    def is_terminal(self) -> bool:
        return self in (ReviewStatus.APPROVED, ReviewStatus.REJECTED)


class ActionStatus(str, Enum):
    """Follow-up (corrective action) state, only meaningful once approved."""

    NONE = "NONE"
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    VERIFIED = "VERIFIED"
    OVERDUE = "OVERDUE"


class ReviewAction(str, Enum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    REQUEST_MORE = "REQUEST_MORE"
    MARK_URGENT = "MARK_URGENT"
    ASSIGN = "ASSIGN"
    CLOSE = "CLOSE"
    RESUBMIT = "RESUBMIT"


class RejectReason(str, Enum):
    DUPLICATE = "DUPLICATE"
    UNCLEAR_PHOTO = "UNCLEAR_PHOTO"
    INSUFFICIENT = "INSUFFICIENT"
    FALSE = "FALSE"
    IRRELEVANT = "IRRELEVANT"
    OTHER = "OTHER"


class PointsReason(str, Enum):
    """Reason codes written to the points ledger."""

    REPORT_APPROVED = "REPORT_APPROVED"
    FALSE_REPORT_PENALTY = "FALSE_REPORT_PENALTY"
    RESUBMIT_BONUS = "RESUBMIT_BONUS"


class BlockReason(str, Enum):
    DUPLICATE_WITHIN_24H = "DUPLICATE_WITHIN_24H"
    DAILY_POST_LIMIT = "DAILY_POST_LIMIT"
    DAILY_POINT_LIMIT = "DAILY_POINT_LIMIT"


class AttendanceSource(str, Enum):
    INTERNAL = "INTERNAL"
    FAS = "FAS"
