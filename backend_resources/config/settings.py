"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = Path("/run/secrets") / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                logger.info("Loaded %s from /run/secrets", secret_name)
                return secret_value
        except OSError as e:
            logger.warning("Failed to read /run/secrets/%s: %s", secret_name, e)

    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            return secret_value

    return None


@dataclass
class AppConfig:
    """Application configuration container."""
    # Mode
    demo_mode: bool

    # Keycloak
    keycloak_url: str = ""
    keycloak_realm: str = "ITM"
    keycloak_service_realm: str = "ITM"
    keycloak_issuer: str = ""
    keycloak_server_url: str = ""

    # Service Account
    keycloak_service_client_id: str = "backend-resources"
    keycloak_service_client_secret: str = ""

    # Admin credentials (fallback when no service account secret is set)
    keycloak_admin: str = ""
    keycloak_admin_password: str = ""

    # Outbound calls
    request_timeout: float = 5.0
    retry_transient: bool = True

    # HTTP surface
    moderator_role: str = "MODERATOR"
    api_prefix: str = "/api"
    token_audience: str = ""
    max_content_length: int = 65536
    log_level: str = "INFO"

    @property
    def service_client_secret_resolved(self) -> str:
        """Get Keycloak service account client secret with smart fallback.

        Priority:
        1. Configured value in keycloak_service_client_secret
        2. Docker secrets: /run/secrets/keycloak_service_client_secret
        3. Environment variable: KEYCLOAK_SERVICE_CLIENT_SECRET
        4. Demo mode: "demo-service-secret"

        Returns:
            Client secret string, empty when none is available
        """
        if self.keycloak_service_client_secret:
            return self.keycloak_service_client_secret

        secret = _load_secret_from_file("keycloak_service_client_secret", "KEYCLOAK_SERVICE_CLIENT_SECRET")
        if secret:
            return secret

        if self.demo_mode:
            return "demo-service-secret"
        return ""


def _env_flag(var_name: str, default: str = "false") -> bool:
    return os.environ.get(var_name, default).strip().lower() == "true"


def _get_or_default(var_name: str, demo_default: Optional[str] = None, demo_mode: bool = False) -> str:
    """Get environment variable, the demo default, or fail in production mode."""
    value = os.environ.get(var_name)
    if value:
        return value

    if demo_mode and demo_default is not None:
        logger.info("[demo-mode] Using default for %s", var_name)
        return demo_default

    raise RuntimeError(f"Environment variable {var_name} is required in production mode.")


def load_settings() -> AppConfig:
    """Load application settings from environment and /run/secrets."""
    demo_mode = _env_flag("DEMO_MODE")

    keycloak_realm = os.environ.get("KEYCLOAK_REALM", "ITM")
    keycloak_service_realm = os.environ.get("KEYCLOAK_SERVICE_REALM", keycloak_realm)

    keycloak_url = _get_or_default(
        "KEYCLOAK_URL",
        demo_default="http://127.0.0.1:8080",
        demo_mode=demo_mode,
    ).rstrip("/")
    keycloak_issuer = _get_or_default(
        "KEYCLOAK_ISSUER",
        demo_default=f"{keycloak_url}/realms/{keycloak_realm}",
        demo_mode=demo_mode,
    ).rstrip("/")
    keycloak_server_url = os.environ.get("KEYCLOAK_SERVER_URL", keycloak_issuer).rstrip("/")

    keycloak_service_client_secret = _load_secret_from_file(
        "keycloak_service_client_secret",
        "KEYCLOAK_SERVICE_CLIENT_SECRET",
    ) or ""
    keycloak_admin_password = _load_secret_from_file(
        "keycloak_admin_password",
        "KEYCLOAK_ADMIN_PASSWORD",
    ) or ""

    try:
        request_timeout = float(os.environ.get("KEYCLOAK_REQUEST_TIMEOUT", "5"))
        max_content_length = int(os.environ.get("MAX_CONTENT_LENGTH", "65536"))
    except ValueError as exc:
        raise RuntimeError(f"Invalid numeric setting: {exc}") from exc

    api_prefix = "/" + os.environ.get("API_PREFIX", "/api").strip().strip("/")

    cfg = AppConfig(
        demo_mode=demo_mode,
        keycloak_url=keycloak_url,
        keycloak_realm=keycloak_realm,
        keycloak_service_realm=keycloak_service_realm,
        keycloak_issuer=keycloak_issuer,
        keycloak_server_url=keycloak_server_url,
        keycloak_service_client_id=os.environ.get("KEYCLOAK_SERVICE_CLIENT_ID", "backend-resources"),
        keycloak_service_client_secret=keycloak_service_client_secret,
        keycloak_admin=os.environ.get("KEYCLOAK_ADMIN", ""),
        keycloak_admin_password=keycloak_admin_password,
        request_timeout=request_timeout,
        retry_transient=_env_flag("KEYCLOAK_RETRY_TRANSIENT", "true"),
        moderator_role=os.environ.get("MODERATOR_ROLE", "MODERATOR").strip(),
        api_prefix="" if api_prefix == "/" else api_prefix,
        token_audience=os.environ.get("TOKEN_AUDIENCE", "").strip(),
        max_content_length=max_content_length,
        log_level=os.environ.get("LOG_LEVEL", "INFO").strip().upper(),
    )

    mode_label = "DEMO" if demo_mode else "PRODUCTION"
    logger.info("Mode=%s; realm=%s; client_id=%s", mode_label, keycloak_realm, cfg.keycloak_service_client_id)
    if demo_mode:
        logger.warning("Demo defaults in use. Do not deploy with these settings.")

    return cfg
