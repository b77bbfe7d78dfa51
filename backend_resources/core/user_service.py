"""User orchestration on top of the Keycloak user admin.

create_user normalizes every provider fault into ApplicationError so the
HTTP layer can answer with the provider's status. get_user_by_id lets
provider faults propagate untouched; they surface as 500.
"""
from __future__ import annotations
import logging
from uuid import UUID

from . import mapper
from .exceptions import ApplicationError
from .keycloak import KeycloakAPIError, KeycloakAuthError, KeycloakUserAdmin, MissingLocationError
from .models import UserRequest, UserResponse

logger = logging.getLogger(__name__)

SERVICE_CREDENTIALS_REJECTED = "Identity provider rejected the service credentials"


class UserService:
    """Create and fetch users through an injected KeycloakUserAdmin."""

    def __init__(self, user_admin: KeycloakUserAdmin):
        self.user_admin = user_admin

    def create_user(self, request: UserRequest) -> None:
        """Create a user with a permanent password.

        Raises:
            ApplicationError: Carrying Keycloak's status and message
        """
        payload = {
            "username": request.username,
            "email": request.email,
            "firstName": request.first_name,
            "lastName": request.last_name,
            "enabled": True,
            "credentials": [
                {"type": "password", "value": request.password, "temporary": False},
            ],
        }
        try:
            user_id = self.user_admin.create(payload)
        except KeycloakAuthError as exc:
            # The service's own credentials were refused, not the caller's token.
            logger.error("Keycloak refused service credentials: [%s] %s", exc.status_code, exc.message)
            raise ApplicationError(SERVICE_CREDENTIALS_REJECTED, 502) from exc
        except KeycloakAPIError as exc:
            logger.error("Keycloak rejected user '%s': [%s] %s", request.username, exc.status_code, exc.message)
            raise ApplicationError(exc.message, exc.status_code) from exc
        except MissingLocationError as exc:
            logger.error("Keycloak created user '%s' without a Location header", request.username)
            raise ApplicationError(str(exc), 500) from exc

        logger.info("Created user '%s' (id=%s)", request.username, user_id)

    def get_user_by_id(self, user_id: UUID) -> UserResponse:
        # Provider faults (404 included) are not wrapped here.
        key = str(user_id)
        record = self.user_admin.get(key)
        roles = self.user_admin.roles_of(key)
        groups = self.user_admin.groups_of(key)
        return mapper.to_response(record, roles, groups)
