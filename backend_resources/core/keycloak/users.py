"""Keycloak user management operations."""
from __future__ import annotations
import logging
from typing import Any, Dict, List

from .client import KeycloakClient
from .exceptions import MissingLocationError

logger = logging.getLogger(__name__)


class KeycloakUserAdmin:
    """Realm-scoped user operations on the Keycloak Admin API."""

    def __init__(self, client: KeycloakClient, realm: str):
        """Initialize user admin.

        Args:
            client: Keycloak client (authenticates lazily)
            realm: Realm whose users are managed
        """
        self.client = client
        self.realm = realm

    @property
    def _users_path(self) -> str:
        return f"/admin/realms/{self.realm}/users"

    def create(self, attributes: Dict[str, Any]) -> str:
        """Create a user and return the id Keycloak assigned to it.

        Args:
            attributes: Keycloak UserRepresentation payload

        Returns:
            New user id, read from the Location header

        Raises:
            KeycloakAPIError: If Keycloak rejects the user (e.g. 409 duplicate)
            MissingLocationError: If the response carries no Location header
        """
        resp = self.client.post(self._users_path, json=attributes)
        location = resp.headers.get("Location")
        if not location:
            raise MissingLocationError("Location header is null, expected URI for created user")
        return location.rstrip("/").rsplit("/", 1)[-1]

    def get(self, user_id: str) -> Dict[str, Any]:
        """Return the user representation for an id (404 raises KeycloakAPIError)."""
        return self.client.get(f"{self._users_path}/{user_id}").json()

    def roles_of(self, user_id: str) -> List[Dict[str, Any]]:
        """Return the user's realm role mappings in Keycloak's order."""
        mappings = self.client.get(f"{self._users_path}/{user_id}/role-mappings").json() or {}
        return mappings.get("realmMappings") or []

    def groups_of(self, user_id: str) -> List[Dict[str, Any]]:
        """Return the groups the user belongs to in Keycloak's order."""
        return self.client.get(f"{self._users_path}/{user_id}/groups").json() or []

    def count(self) -> int:
        """Number of users in the realm; also proves the service credentials work."""
        return int(self.client.get(f"{self._users_path}/count").json())

    def delete(self, user_id: str) -> None:
        """Delete a user. Used by the CLI and test teardown only."""
        self.client.delete(f"{self._users_path}/{user_id}")
        logger.info("Deleted Keycloak user %s from realm %s", user_id, self.realm)

    def find_id_by_username(self, username: str) -> str | None:
        """Return the id of the user whose username matches exactly."""
        resp = self.client.get(self._users_path, params={"username": username, "exact": "true"})
        for user in resp.json():
            if (user.get("username") or "").lower() == username.lower():
                return user.get("id")
        return None
