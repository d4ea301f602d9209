from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Optional, Type, TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def require_non_empty(value: str, field_name: str) -> str:
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"{field_name} must be text")
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_bool(value, field_name: str) -> bool:
    # JSON "false" is a non-empty string, so no truthiness coercion here
    if not isinstance(value, bool):
        raise ValidationError(f"{field_name} must be true or false")
    return value


def require_email(value: str, field_name: str) -> str:
    value = require_non_empty(value, field_name)
    local, _, domain = value.partition("@")
    if not local or "." not in domain:
        raise ValidationError(f"{field_name} is not a valid email address")
    return value


def require_positive_int(value, field_name: str) -> int:
    # bool is an int subclass
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a positive whole number")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a positive whole number")
    if number != value and not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a positive whole number")
    if number <= 0:
        raise ValidationError(f"{field_name} must be a positive whole number")
    return number


def require_non_negative_int(value, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a whole number")
    if number < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return number


def require_enum(enum_cls: Type[E], value, field_name: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}")


def require_date_order(start: date, end: date, *, message: Optional[str] = None) -> None:
    if end < start:
        raise ValidationError(message or "End date must be on or after start date")


def optional_text(value, field_name: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be text")
    return value.strip()
