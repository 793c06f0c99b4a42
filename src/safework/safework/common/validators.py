from __future__ import annotations

from enum import Enum
from typing import Optional, TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def require_non_empty(value: str, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} 값이 올바르지 않습니다")
    return value.strip()


def optional_text(value: Optional[str], field_name: str = "입력") -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} 값은 문자열이어야 합니다")
    return value.strip() or None


def optional_bool(value, field_name: str, *, default: bool = False) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValidationError(f"{field_name}은(는) true/false 값이어야 합니다")
    return value


def require_enum(enum_cls: type[E], value, field_name: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value or "").strip().upper())
    except ValueError:
        raise ValidationError(f"{field_name} 값이 올바르지 않습니다: {value}")


def optional_enum(enum_cls: type[E], value, field_name: str) -> Optional[E]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return require_enum(enum_cls, value, field_name)


def require_hour(value, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field_name}은(는) 0~23 사이의 정수여야 합니다")
    if value < 0 or value > 23:
        raise ValidationError(f"{field_name}은(는) 0~23 사이의 정수여야 합니다")
    return value


def require_positive_int(value, field_name: str) -> int:
    try:
        out = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} 값이 올바르지 않습니다")
    if out <= 0:
        raise ValidationError(f"{field_name} 값이 올바르지 않습니다")
    return out
