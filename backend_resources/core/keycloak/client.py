"""Low-level HTTP client for Keycloak Admin API.

Handles authentication, token management, and HTTP operations.
"""
from __future__ import annotations
import logging
import os
import threading
import time
from typing import Optional, Dict, Any
from datetime import datetime, timedelta

import requests

from .exceptions import KeycloakAPIError, KeycloakAuthError, KeycloakUnavailableError

REQUEST_TIMEOUT = 5
RETRY_BACKOFF = 0.2

# Safe to replay: repeating them leaves Keycloak in the same state.
IDEMPOTENT_METHODS = frozenset({"GET", "PUT", "DELETE"})
TRANSIENT_STATUSES = frozenset({502, 503, 504})

logger = logging.getLogger(__name__)


class KeycloakClient:
    """HTTP client for Keycloak Admin API with automatic token management.

    Features:
    - Lazy authentication, token refreshed shortly before it expires
    - Bounded timeout on every call, one retry on transient faults
      for idempotent requests
    - Centralized error handling
    - Support for both service account and admin authentication

    Usage:
        client = KeycloakClient("http://keycloak:8080")
        client.use_service_account("ITM", "backend-resources", "secret")
        response = client.get("/admin/realms/ITM/users/<id>")
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = REQUEST_TIMEOUT,
        retry_transient: bool = True,
    ):
        """Initialize Keycloak client.

        Args:
            base_url: Keycloak base URL (defaults to KEYCLOAK_URL env var)
            timeout: Seconds allowed for each outbound call
            retry_transient: Retry idempotent calls once on transient faults
        """
        self.base_url = (base_url or os.environ.get("KEYCLOAK_URL", "http://keycloak:8080")).rstrip("/")
        self.timeout = timeout
        self.retry_transient = retry_transient
        self._token: Optional[str] = None
        self._token_expires_at: Optional[datetime] = None
        self._auth_method: Optional[str] = None
        self._auth_params: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def use_service_account(self, auth_realm: str, client_id: str, client_secret: str) -> None:
        """Authenticate with the client credentials grant on first use."""
        self._auth_method = "service_account"
        self._auth_params = {
            "auth_realm": auth_realm,
            "client_id": client_id,
            "client_secret": client_secret,
        }
        self._token = None

    def use_admin(self, username: str, password: str, realm: str = "master") -> None:
        """Authenticate with the admin-cli password grant on first use."""
        self._auth_method = "admin"
        self._auth_params = {"username": username, "password": password, "realm": realm}
        self._token = None

    def _ensure_authenticated(self) -> str:
        """Return a valid token, fetching a new one if missing or expiring soon."""
        with self._lock:
            if self._token and self._token_expires_at and datetime.now() < self._token_expires_at - timedelta(seconds=10):
                return self._token

            if self._auth_method == "admin":
                payload = self._fetch_token(
                    self._auth_params["realm"],
                    {
                        "grant_type": "password",
                        "client_id": "admin-cli",
                        "username": self._auth_params["username"],
                        "password": self._auth_params["password"],
                    },
                )
            elif self._auth_method == "service_account":
                payload = self._fetch_token(
                    self._auth_params["auth_realm"],
                    {
                        "grant_type": "client_credentials",
                        "client_id": self._auth_params["client_id"],
                        "client_secret": self._auth_params["client_secret"],
                    },
                )
            else:
                raise KeycloakAuthError(401, "Not authenticated - call use_service_account or use_admin first", "")

            self._token = payload["access_token"]
            expires_in = int(payload.get("expires_in") or 60)
            self._token_expires_at = datetime.now() + timedelta(seconds=expires_in)
            return self._token

    def _fetch_token(self, realm: str, data: Dict[str, str]) -> Dict[str, Any]:
        url = f"{self.base_url}/realms/{realm}/protocol/openid-connect/token"
        try:
            resp = requests.post(url, data=data, timeout=self.timeout)
        except requests.RequestException as exc:
            raise KeycloakUnavailableError(f"Token endpoint unreachable: {exc}", url) from exc
        if resp.status_code != 200:
            raise KeycloakAuthError(resp.status_code, _error_message(resp), url)
        logger.debug("Obtained Keycloak token via %s grant", data["grant_type"])
        return resp.json()

    def get(self, path: str, params: Optional[Dict] = None, **kwargs) -> requests.Response:
        """Execute GET request with automatic authentication."""
        return self._request("GET", path, params=params, **kwargs)

    def post(self, path: str, json: Optional[Any] = None, **kwargs) -> requests.Response:
        """Execute POST request with automatic authentication. Never retried."""
        return self._request("POST", path, json=json, **kwargs)

    def put(self, path: str, json: Optional[Any] = None, **kwargs) -> requests.Response:
        """Execute PUT request with automatic authentication."""
        return self._request("PUT", path, json=json, **kwargs)

    def delete(self, path: str, **kwargs) -> requests.Response:
        """Execute DELETE request with automatic authentication."""
        return self._request("DELETE", path, **kwargs)

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        """Send one request, retrying once on a transient fault when allowed.

        Raises:
            KeycloakAPIError: On HTTP status >= 400
            KeycloakUnavailableError: When Keycloak cannot be reached
        """
        url = f"{self.base_url}{path}"
        headers = kwargs.pop("headers", {})
        attempts = 2 if self.retry_transient and method in IDEMPOTENT_METHODS else 1

        for attempt in range(1, attempts + 1):
            headers["Authorization"] = f"Bearer {self._ensure_authenticated()}"
            try:
                resp = requests.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
            except (requests.ConnectionError, requests.Timeout) as exc:
                if attempt < attempts:
                    logger.warning("Keycloak %s %s failed (%s), retrying once", method, path, exc)
                    time.sleep(RETRY_BACKOFF)
                    continue
                raise KeycloakUnavailableError(f"Keycloak unreachable: {exc}", url) from exc

            if resp.status_code in TRANSIENT_STATUSES and attempt < attempts:
                logger.warning("Keycloak %s %s returned %s, retrying once", method, path, resp.status_code)
                time.sleep(RETRY_BACKOFF)
                continue

            self._handle_error(resp)
            return resp

    def _handle_error(self, resp: requests.Response) -> None:
        """Centralized error handling for HTTP responses.

        Raises:
            KeycloakAPIError: If response status indicates error
        """
        if resp.status_code >= 400:
            raise KeycloakAPIError(resp.status_code, _error_message(resp), resp.url)


def _error_message(resp: requests.Response) -> str:
    """Extract Keycloak's error text (errorMessage / error_description / error)."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("errorMessage", "error_description", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    text = (resp.text or "").strip()
    if text:
        return text
    return f"HTTP {resp.status_code} {resp.reason or ''}".strip()
