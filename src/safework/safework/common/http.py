"""Request helpers shared by the controllers: caller identity, JSON body, rate limits."""

from __future__ import annotations

from functools import wraps

from flask import current_app, request, session

from ..core.constants import DEFAULT_RATE_LIMIT_MAX_REQUESTS, DEFAULT_RATE_LIMIT_WINDOW_SECONDS
from ..core.enums import Role
from ..core.exceptions import RateLimitExceededError, ValidationError
from ..ratelimit.limiter import RateLimiter
from ..users.model import Actor
from .responses import error


def current_actor() -> Actor | None:
    """Caller from the session; issuing sessions happens outside this service."""
    if "user_id" not in session:
        return None
    try:
        return Actor(user_id=int(session["user_id"]), role=Role(session.get("role", Role.WORKER.value)))
    except (TypeError, ValueError):
        return None


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("요청 본문은 JSON 객체여야 합니다")
    return data


def rate_limited(limiter: RateLimiter, scope: str):
    """Per-caller fixed-window limit; answers 429 once the window is used up."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            limit = int(current_app.config.get("RATE_LIMIT_MAX_REQUESTS", DEFAULT_RATE_LIMIT_MAX_REQUESTS))
            window = int(current_app.config.get("RATE_LIMIT_WINDOW_SECONDS", DEFAULT_RATE_LIMIT_WINDOW_SECONDS))
            caller = session.get("user_id") or request.remote_addr or "anonymous"
            result = limiter.check_limit(f"{scope}:{caller}", limit, window)

            headers = {
                "X-RateLimit-Limit": str(limit),
                "X-RateLimit-Remaining": str(result.remaining),
                "X-RateLimit-Reset": str(int(result.reset_at.timestamp())),
            }
            if not result.allowed:
                body, status = error(
                    RateLimitExceededError.code,
                    "요청이 너무 많습니다. 잠시 후 다시 시도해 주세요",
                    RateLimitExceededError.status_code,
                )
                return body, status, headers

            rv = current_app.make_response(view(*args, **kwargs))
            rv.headers.extend(headers)
            return rv

        return wrapper

    return decorator
