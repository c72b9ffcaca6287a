"""
Field validators shared by the users and auth services.
Each validator returns the cleaned value or raises ValidationError.
"""

import re
from datetime import date, datetime
from typing import Any, Dict, Optional

from event_api.errors import ValidationError

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
NON_DIGIT_RE = re.compile(r"[^0-9]")
CPF_LENGTH = 11
PASSWORD_MIN_LENGTH = 6


def json_object(data: Any) -> Dict[str, Any]:
    """Treat a missing or non-object JSON body as an empty payload."""
    return data if isinstance(data, dict) else {}


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def require_text(value: Any, field: str) -> str:
    if is_blank(value):
        raise ValidationError(f"{field} is required")
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    return value


def validate_email(value: Any) -> str:
    email = require_text(value, "email")
    if not EMAIL_RE.match(email):
        raise ValidationError("Invalid email format")
    return email


def normalize_cpf(value: Any) -> str:
    """
    Strip punctuation from a CPF and check the digit count.

    "987.654.321-00" -> "98765432100"

    Raises:
        ValidationError: If fewer or more than 11 digits remain.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    cpf = NON_DIGIT_RE.sub("", require_text(value, "cpf"))
    if len(cpf) != CPF_LENGTH:
        raise ValidationError(f"CPF must contain {CPF_LENGTH} digits")
    return cpf


def parse_date_of_birth(value: Any) -> date:
    """
    Parse an ISO-8601 date ("YYYY-MM-DD").

    A full ISO datetime is also accepted and truncated to its date part.
    """
    raw = require_text(value, "date_of_birth").strip()
    try:
        return date.fromisoformat(raw)
    except ValueError:
        pass
    try:
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        return datetime.fromisoformat(raw).date()
    except ValueError:
        raise ValidationError("Invalid date of birth. Use the format YYYY-MM-DD") from None


def validate_password(value: Any) -> str:
    password = require_text(value, "password")
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    return password


def clean_city(value: Any) -> Optional[str]:
    """An empty or null city is stored as NULL."""
    if is_blank(value):
        return None
    if not isinstance(value, str):
        raise ValidationError("city must be a string")
    return value
