"""Keycloak user representation -> UserResponse projection."""
from __future__ import annotations
from typing import Any, Dict, Iterable, Optional

from .models import UserResponse


def to_response(
    record: Dict[str, Any],
    roles: Optional[Iterable[Dict[str, Any]]],
    groups: Optional[Iterable[Dict[str, Any]]],
) -> UserResponse:
    """Flatten a user record with its role mappings and groups.

    Role and group names keep the order Keycloak returned them in;
    duplicates are not removed.
    """
    return UserResponse(
        first_name=record.get("firstName"),
        last_name=record.get("lastName"),
        email=record.get("email"),
        roles=[role.get("name") for role in roles or []],
        groups=[group.get("name") for group in groups or []],
    )
