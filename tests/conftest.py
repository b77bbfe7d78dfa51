"""Pytest shared fixtures."""
import os
import pathlib
import sys
import time
from types import SimpleNamespace
from typing import Optional
from unittest.mock import Mock

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Configure test environment BEFORE any app imports
os.environ.setdefault("DEMO_MODE", "true")
os.environ.setdefault("KEYCLOAK_REALM", "ITM")

import pytest
import requests
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives import serialization
from authlib.jose import jwt as authlib_jwt

from backend_resources.api import decorators
from backend_resources.config import AppConfig
from backend_resources.core.keycloak import KeycloakUserAdmin
from backend_resources.flask_app import create_app

ISSUER = "http://keycloak.test/realms/ITM"


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _block_network(monkeypatch, request):
    """
    Prevent unit tests from hitting Keycloak.

    Integration tests are explicitly marked with @pytest.mark.integration and
    are allowed to perform real HTTP calls by skipping this fixture.
    """
    if request.node.get_closest_marker("integration"):
        return

    def _fail(method):
        def _stub(url, *args, **kwargs):
            raise RuntimeError(f"Unexpected HTTP {method} in unit test: {url}")
        return _stub

    monkeypatch.setattr(requests, "get", _fail("GET"))
    monkeypatch.setattr(requests, "post", _fail("POST"))
    monkeypatch.setattr(requests, "request", lambda method, url, *a, **kw: _fail(method)(url))


# ─────────────────────────────────────────────────────────────────────────────
# RSA Key Pair for JWT Testing
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(scope="session")
def rsa_key_pair():
    """Generate RSA key pair for JWT signing in tests."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)

    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )

    return {
        "private_key": private_key,
        "private_pem": private_pem,
        "public_key": private_key.public_key(),
    }


def create_valid_jwt(
    rsa_key_pair: dict,
    issuer: str = ISSUER,
    sub: str = "user-123",
    username: Optional[str] = "alice",
    roles: Optional[list[str]] = None,
    client_roles: Optional[dict[str, list[str]]] = None,
    exp_offset: int = 3600,
    extra_claims: Optional[dict] = None,
) -> str:
    """Create an RS256-signed access token shaped like Keycloak's."""
    if roles is None:
        roles = ["MODERATOR"]

    now = int(time.time())
    header = {"alg": "RS256", "typ": "JWT", "kid": "default-key-id"}
    payload = {
        "iss": issuer,
        "aud": "account",
        "sub": sub,
        "exp": now + exp_offset,
        "iat": now,
        "realm_access": {"roles": roles},
    }
    if username:
        payload["preferred_username"] = username
    if client_roles:
        payload["resource_access"] = {client: {"roles": r} for client, r in client_roles.items()}
    if extra_claims:
        payload.update(extra_claims)

    token = authlib_jwt.encode(header, payload, rsa_key_pair["private_pem"])
    return token.decode("utf-8") if isinstance(token, bytes) else token


@pytest.fixture()
def bearer(rsa_key_pair):
    """Build an Authorization header for a caller with the given roles."""
    def _bearer(roles=None, username="alice", **kwargs):
        token = create_valid_jwt(rsa_key_pair, roles=roles, username=username, **kwargs)
        return {"Authorization": f"Bearer {token}"}
    return _bearer


@pytest.fixture()
def stub_jwks(monkeypatch, rsa_key_pair):
    """Serve the test public key instead of fetching Keycloak's JWKS."""
    class _JWKS:
        def get_signing_key_from_jwt(self, token):
            return SimpleNamespace(key=rsa_key_pair["public_key"])

    monkeypatch.setattr(decorators, "get_jwks_client", lambda: _JWKS())


# ─────────────────────────────────────────────────────────────────────────────
# Flask Test Client
# ─────────────────────────────────────────────────────────────────────────────
def make_config(**overrides) -> AppConfig:
    base = dict(
        demo_mode=True,
        keycloak_url="http://keycloak.test",
        keycloak_realm="ITM",
        keycloak_service_realm="ITM",
        keycloak_issuer=ISSUER,
        keycloak_server_url=ISSUER,
        keycloak_service_client_id="backend-resources",
        keycloak_service_client_secret="test-secret",
        moderator_role="MODERATOR",
        api_prefix="/api",
    )
    base.update(overrides)
    return AppConfig(**base)


@pytest.fixture()
def user_admin():
    """Keycloak user admin double; tests program its return values."""
    return Mock(spec=KeycloakUserAdmin)


@pytest.fixture()
def app(user_admin, stub_jwks):
    flask_app = create_app(make_config(), user_admin=user_admin)
    flask_app.config.update(TESTING=True)
    return flask_app


@pytest.fixture()
def client(app):
    with app.test_client() as client:
        yield client


# ─────────────────────────────────────────────────────────────────────────────
# Pytest Configuration
# ─────────────────────────────────────────────────────────────────────────────
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (requires running Keycloak)"
    )
