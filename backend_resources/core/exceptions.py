"""Application-level errors raised by the user service and request parsing."""
from __future__ import annotations


class ValidationError(Exception):
    """Request failed local validation. Always rendered as 400.

    Attributes:
        errors: Mapping of JSON field name to the first message for that field
    """

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        super().__init__(", ".join(f"{field}: {message}" for field, message in errors.items()))


class ApplicationError(Exception):
    """Identity provider rejected an operation; carries the HTTP status to answer with."""

    def __init__(self, message: str, http_status: int):
        self.message = message
        self.http_status = http_status
        super().__init__(message)
