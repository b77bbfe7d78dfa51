"""Input validation helpers for user data.

Each validator returns the value unchanged or raises ValueError with the
message reported back to the client for that field.
"""
from __future__ import annotations
import re

USERNAME_MIN_LENGTH = 2
USERNAME_MAX_LENGTH = 30
PASSWORD_MIN_LENGTH = 4

EMAIL_PATTERN = re.compile(
    r"^[^@\s]+@[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?)+$"
)


def _require_text(value, message: str) -> str:
    if value is None:
        raise ValueError(message)
    if not isinstance(value, str):
        raise ValueError("Must be a string")
    if not value.strip():
        raise ValueError(message)
    return value


def validate_username(value) -> str:
    """Username must be non-blank and 2 to 30 characters long."""
    value = _require_text(value, "Username should not be blank")
    if not USERNAME_MIN_LENGTH <= len(value) <= USERNAME_MAX_LENGTH:
        raise ValueError(
            f"Username should be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters long"
        )
    return value


def validate_email(value) -> str:
    """Email must be non-blank and look like local@domain.tld."""
    value = _require_text(value, "Email should not be blank")
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Email should be valid")
    return value


def validate_password(value) -> str:
    value = _require_text(value, "Password should not be blank")
    if len(value) < PASSWORD_MIN_LENGTH:
        raise ValueError(f"Password should be at least {PASSWORD_MIN_LENGTH} characters long")
    return value


def validate_name(value, field: str) -> str:
    """Validate first/last name fields.

    Args:
        value: Name to validate
        field: Field label for error messages (e.g., "First name")
    """
    return _require_text(value, f"{field} should not be blank")
