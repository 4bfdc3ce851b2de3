from __future__ import annotations

import re
from datetime import date
from typing import Any

from markupsafe import escape

from ..core.enums import ErrorKind
from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_date, years_between

_EMAIL_RE = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+$"
)
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def require_non_empty(value: Any, field_name: str) -> str:
    if is_blank(value):
        raise ValidationError(f"{field_name} is required", kind=ErrorKind.MISSING_FIELD)
    return str(value).strip()


def sanitize_text(value: Any) -> Any:
    """Trim, drop control characters and neutralize markup.

    Non-string values pass through untouched.
    """
    if not isinstance(value, str):
        return value
    cleaned = _CONTROL_CHARS_RE.sub("", value.strip())
    return str(escape(cleaned))


def is_valid_email(value: str) -> bool:
    return bool(value) and len(value) <= 255 and bool(_EMAIL_RE.match(value))


def require_email(value: str) -> str:
    if not is_valid_email(value):
        raise ValidationError("Invalid email format", kind=ErrorKind.INVALID_EMAIL)
    return value.lower()


def require_date(value: Any, field_name: str) -> date:
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        if not _ISO_DATE_RE.match(text):
            raise ValueError(text)
        return parse_iso_date(text)
    except ValueError:
        raise ValidationError(f"{field_name} must be a valid date (YYYY-MM-DD)", kind=ErrorKind.INVALID_DATE)


def require_minimum_age(born: date, *, today: date, min_age: int) -> date:
    if years_between(born, today) < min_age:
        raise ValidationError(f"You must be at least {min_age} years old", kind=ErrorKind.UNDERAGE)
    return born


def parse_positive_int(value: Any) -> int:
    """Accept ints and digit-only strings; reject bools, floats and zero."""
    if isinstance(value, bool):
        raise ValueError("bool is not an id")
    if isinstance(value, int):
        number = value
    elif isinstance(value, str) and value.strip().isdigit():
        number = int(value.strip())
    else:
        raise ValueError(f"not a positive integer: {value!r}")
    if number <= 0:
        raise ValueError(f"not a positive integer: {value!r}")
    return number


def require_positive_int(value: Any, message: str, *, kind: ErrorKind) -> int:
    try:
        return parse_positive_int(value)
    except ValueError:
        raise ValidationError(message, kind=kind)
