"""Keycloak Admin API client library.

Architecture:
- client.py: HTTP client with lazy authentication, token refresh and retry
- users.py: Realm-scoped user operations (create, get, roles, groups, delete)
- exceptions.py: Typed exceptions for error handling

Usage:
    from backend_resources.core.keycloak import KeycloakClient, KeycloakUserAdmin

    client = KeycloakClient("http://keycloak:8080")
    client.use_service_account("ITM", "backend-resources", "secret")

    users = KeycloakUserAdmin(client, "ITM")
    user = users.get("60208bfd-25c0-49c6-8139-8059d997eeda")
"""
from .client import KeycloakClient, REQUEST_TIMEOUT
from .exceptions import (
    KeycloakError,
    KeycloakAPIError,
    KeycloakAuthError,
    KeycloakUnavailableError,
    MissingLocationError,
)
from .users import KeycloakUserAdmin

__all__ = [
    "KeycloakClient",
    "KeycloakUserAdmin",
    "REQUEST_TIMEOUT",
    "KeycloakError",
    "KeycloakAPIError",
    "KeycloakAuthError",
    "KeycloakUnavailableError",
    "MissingLocationError",
]
