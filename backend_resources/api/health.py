"""Liveness and readiness probes.

/health answers as long as the process serves requests. /ready makes one
authenticated Admin API call for the managed realm, so it fails while
Keycloak is down or refuses the service credentials.
"""
import logging

from flask import Blueprint, current_app

from backend_resources.core.keycloak import KeycloakError

bp = Blueprint("health", __name__)

logger = logging.getLogger(__name__)

PLAIN_TEXT = {"Content-Type": "text/plain"}


@bp.route("/health")
def health_check():
    return ("ok", 200, PLAIN_TEXT)


@bp.route("/ready")
def readiness_check():
    user_admin = current_app.extensions["user_service"].user_admin
    try:
        user_admin.count()
    except KeycloakError as exc:
        logger.warning("Readiness check failed: %s", exc)
        return ("keycloak unavailable", 503, PLAIN_TEXT)
    return ("ready", 200, PLAIN_TEXT)
