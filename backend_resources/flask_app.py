"""Flask application factory and bootstrap.

This module provides the create_app() factory function for initializing
the Flask application with its blueprints, error handlers and the
Keycloak-backed user service.
"""
from __future__ import annotations
import logging
import os
from typing import Optional

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from backend_resources.config import AppConfig, load_settings
from backend_resources.core import UserService
from backend_resources.core.keycloak import KeycloakClient, KeycloakUserAdmin

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Application Factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(config: Optional[AppConfig] = None, user_admin: Optional[KeycloakUserAdmin] = None) -> Flask:
    """Create and configure Flask application.

    Args:
        config: Settings; loaded from the environment when omitted
        user_admin: Keycloak user admin; built from config when omitted
    """
    cfg = config or load_settings()
    _configure_logging(cfg.log_level)

    app = Flask(__name__)
    app.config["APP_CONFIG"] = cfg
    app.config["MAX_CONTENT_LENGTH"] = cfg.max_content_length
    app.json.sort_keys = False

    # Trust X-Forwarded-* headers from the reverse proxy
    if os.environ.get("BEHIND_PROXY", "false").lower() == "true":
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)  # type: ignore

    app.extensions["user_service"] = UserService(user_admin or build_user_admin(cfg))

    from backend_resources.api import errors, health, users

    app.register_blueprint(health.bp)
    app.register_blueprint(users.bp, url_prefix=f"{cfg.api_prefix}/users")

    errors.register_error_handlers(app)

    mode_label = "DEMO" if cfg.demo_mode else "PRODUCTION"
    logger.info("Mode=%s; users API registered at %s/users; realm=%s", mode_label, cfg.api_prefix, cfg.keycloak_realm)

    return app


def build_user_admin(cfg: AppConfig) -> KeycloakUserAdmin:
    """Build the Keycloak user admin from settings.

    Uses the service account when a client secret is available, otherwise
    the admin password grant. Authentication happens on the first call.
    """
    client = KeycloakClient(cfg.keycloak_url, timeout=cfg.request_timeout, retry_transient=cfg.retry_transient)

    secret = cfg.service_client_secret_resolved
    if secret:
        client.use_service_account(cfg.keycloak_service_realm, cfg.keycloak_service_client_id, secret)
    elif cfg.keycloak_admin and cfg.keycloak_admin_password:
        client.use_admin(cfg.keycloak_admin, cfg.keycloak_admin_password)
    else:
        raise RuntimeError(
            "No Keycloak credentials configured. "
            "Set KEYCLOAK_SERVICE_CLIENT_SECRET or KEYCLOAK_ADMIN/KEYCLOAK_ADMIN_PASSWORD."
        )

    return KeycloakUserAdmin(client, cfg.keycloak_realm)


def _configure_logging(level: str) -> None:
    """Set the root level; install a stdout handler unless one exists (gunicorn)."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    root.setLevel(getattr(logging, level, logging.INFO))


# ─────────────────────────────────────────────────────────────────────────────
# Application Instance (for Gunicorn)
# ─────────────────────────────────────────────────────────────────────────────
app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=8080, debug=True)
