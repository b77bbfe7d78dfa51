"""Unit tests for the create / fetch orchestration."""
import uuid

import pytest

from backend_resources.core import ApplicationError, UserRequest, UserResponse, UserService
from backend_resources.core.keycloak import (
    KeycloakAPIError,
    KeycloakAuthError,
    KeycloakUnavailableError,
    KeycloakUserAdmin,
    MissingLocationError,
)


@pytest.fixture
def admin(mocker):
    return mocker.create_autospec(KeycloakUserAdmin, instance=True)


@pytest.fixture
def service(admin):
    return UserService(admin)


@pytest.fixture
def user_request():
    return UserRequest(
        username="username_TestUser",
        email="email_test@example.com",
        password="password_",
        first_name="firstName_",
        last_name="lastName_",
    )


def test_create_user_keycloak_error_becomes_application_error(service, admin, user_request):
    admin.create.side_effect = KeycloakAPIError(400, "Keycloak error", "/admin/realms/ITM/users")

    with pytest.raises(ApplicationError) as exc:
        service.create_user(user_request)

    assert exc.value.http_status == 400
    assert "Keycloak error" in exc.value.message
    assert isinstance(exc.value.__cause__, KeycloakAPIError)


def test_create_user_submits_permanent_password(service, admin, user_request):
    admin.create.return_value = "new-id"

    assert service.create_user(user_request) is None

    admin.create.assert_called_once_with({
        "username": "username_TestUser",
        "email": "email_test@example.com",
        "firstName": "firstName_",
        "lastName": "lastName_",
        "enabled": True,
        "credentials": [{"type": "password", "value": "password_", "temporary": False}],
    })


def test_create_user_without_location_is_server_error(service, admin, user_request):
    admin.create.side_effect = MissingLocationError("Location header is null, expected URI for created user")

    with pytest.raises(ApplicationError) as exc:
        service.create_user(user_request)

    assert exc.value.http_status == 500
    assert "Location header is null" in exc.value.message


def test_create_user_unreachable_keycloak_is_503(service, admin, user_request):
    admin.create.side_effect = KeycloakUnavailableError("Keycloak unreachable: refused", "/admin/realms/ITM/users")

    with pytest.raises(ApplicationError) as exc:
        service.create_user(user_request)

    assert exc.value.http_status == 503


def test_create_user_never_logs_password(service, admin, user_request, caplog):
    admin.create.return_value = "new-id"

    with caplog.at_level("DEBUG"):
        service.create_user(user_request)

    assert "password_" not in caplog.text
    assert "new-id" in caplog.text
    assert "password_" not in repr(user_request)


def test_get_user_by_id_maps_record_roles_and_groups(service, admin):
    user_id = uuid.uuid4()
    admin.get.return_value = {"id": str(user_id), "username": "testuser", "firstName": "firstName",
                              "lastName": "lastName", "email": "email@example.com"}
    admin.roles_of.return_value = [{"name": "MODERATOR"}]
    admin.groups_of.return_value = [{"name": "staff"}]

    response = service.get_user_by_id(user_id)

    assert response == UserResponse("firstName", "lastName", "email@example.com", ["MODERATOR"], ["staff"])
    admin.get.assert_called_once_with(str(user_id))


def test_get_user_by_id_empty_roles_and_groups(service, admin):
    admin.get.return_value = {"id": "x", "username": "testuser"}
    admin.roles_of.return_value = []
    admin.groups_of.return_value = []

    response = service.get_user_by_id(uuid.uuid4())

    assert response.roles == []
    assert response.groups == []
    assert response.first_name is None


def test_get_user_by_id_propagates_unexpected_error(service, admin):
    admin.get.side_effect = RuntimeError("Unexpected error")

    with pytest.raises(RuntimeError) as exc:
        service.get_user_by_id(uuid.uuid4())

    assert str(exc.value) == "Unexpected error"


def test_get_user_by_id_does_not_wrap_keycloak_errors(service, admin):
    admin.get.side_effect = KeycloakAPIError(404, "User not found", "/admin/realms/ITM/users/x")

    with pytest.raises(KeycloakAPIError):
        service.get_user_by_id(uuid.uuid4())

    admin.roles_of.assert_not_called()


@pytest.mark.parametrize("status", [400, 401])
def test_create_user_rejected_service_credentials_is_bad_gateway(service, admin, user_request, status):
    admin.create.side_effect = KeycloakAuthError(
        status, "Invalid client secret", "http://kc/realms/ITM/protocol/openid-connect/token"
    )

    with pytest.raises(ApplicationError) as exc:
        service.create_user(user_request)

    assert exc.value.http_status == 502
    assert "Invalid client secret" not in exc.value.message
    assert isinstance(exc.value.__cause__, KeycloakAuthError)
