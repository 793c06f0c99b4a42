class DomainError(Exception):
    """Base exception for business rule violations.

    Every subclass carries a stable machine-readable ``code`` and the HTTP
    status the controller layer answers with.
    """

    code = "DOMAIN_ERROR"
    status_code = 400


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "VALIDATION_ERROR"
    status_code = 400


class InvalidTransitionError(DomainError):
    """Raised when an action is not legal for the report's current status."""

    code = "INVALID_TRANSITION"
    status_code = 400


class AuthenticationError(DomainError):
    """Raised when the caller is not authenticated."""

    code = "UNAUTHORIZED"
    status_code = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "FORBIDDEN"
    status_code = 403


class NotFoundError(DomainError):
    code = "NOT_FOUND"
    status_code = 404


class ConflictError(DomainError):
    """Raised when an optimistic update lost the race to another writer."""

    code = "CONFLICT"
    status_code = 409


class RateLimitExceededError(DomainError):
    code = "RATE_LIMIT_EXCEEDED"
    status_code = 429
