from __future__ import annotations

import re
from typing import Any

from ..core.exceptions import ValidationError

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^\+?\d{10,15}$")
HHMM_RE = re.compile(r"^([01]?\d|2[0-3]):[0-5]\d$")


def require_non_empty(value: Any, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def is_valid_email(value: Any) -> bool:
    return isinstance(value, str) and bool(EMAIL_RE.match(value))


def is_valid_phone(value: Any) -> bool:
    return isinstance(value, str) and bool(PHONE_RE.match(value))


def is_valid_hhmm(value: Any) -> bool:
    return isinstance(value, str) and bool(HHMM_RE.match(value.strip()))


def require_hhmm(value: Any, field_name: str) -> str:
    if not is_valid_hhmm(value):
        raise ValidationError(f"{field_name} must be a time in HH:MM format")
    hours, minutes = value.strip().split(":")
    return f"{int(hours):02d}:{minutes}"
