"""Request and response shapes of the users API."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .exceptions import ValidationError
from .validators import validate_email, validate_name, validate_password, validate_username


@dataclass(frozen=True)
class UserRequest:
    """Validated payload of POST /users."""
    username: str
    email: str
    password: str = field(repr=False)
    first_name: str
    last_name: str

    @classmethod
    def from_payload(cls, payload: Any) -> "UserRequest":
        """Build a request from decoded JSON, collecting every invalid field.

        Raises:
            ValidationError: With a field -> message mapping
        """
        if not isinstance(payload, dict):
            raise ValidationError({"body": "Request body must be a JSON object"})

        checks = (
            ("username", validate_username),
            ("email", validate_email),
            ("password", validate_password),
            ("firstName", lambda value: validate_name(value, "First name")),
            ("lastName", lambda value: validate_name(value, "Last name")),
        )
        values: Dict[str, str] = {}
        errors: Dict[str, str] = {}
        for name, check in checks:
            try:
                values[name] = check(payload.get(name))
            except ValueError as exc:
                errors[name] = str(exc)

        if errors:
            raise ValidationError(errors)

        return cls(
            username=values["username"],
            email=values["email"],
            password=values["password"],
            first_name=values["firstName"],
            last_name=values["lastName"],
        )


@dataclass(frozen=True)
class UserResponse:
    first_name: str | None
    last_name: str | None
    email: str | None
    roles: List[str] = field(default_factory=list)
    groups: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "roles": list(self.roles),
            "groups": list(self.groups),
        }
