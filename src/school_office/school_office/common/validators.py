from __future__ import annotations

import re
from typing import Iterable

from ..core.exceptions import ValidationError

_AADHAAR_RE = re.compile(r"^\d{12}$")
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def require_non_empty(value: str, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_choice(value: str, field_name: str, choices: Iterable[str]) -> str:
    allowed = tuple(choices)
    if value not in allowed:
        raise ValidationError(f"{field_name} must be one of {', '.join(allowed)}")
    return value


def optional_aadhaar(value: str | None, field_name: str) -> str | None:
    if not value:
        return None
    value = value.strip()
    if not _AADHAAR_RE.match(value):
        raise ValidationError(f"{field_name} must be 12 digits")
    return value


def require_email(value: str, field_name: str) -> str:
    value = require_non_empty(value, field_name)
    if not _EMAIL_RE.match(value):
        raise ValidationError(f"{field_name} is not a valid email")
    return value
