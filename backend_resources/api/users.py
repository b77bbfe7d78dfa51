"""User management endpoints.

POST /users         create a user in Keycloak       (moderator role)
GET  /users/<id>    user details, roles and groups  (moderator role)
GET  /users/hello   name of the calling principal   (any authenticated caller)
"""
from __future__ import annotations
import logging
from uuid import UUID

from flask import Blueprint, current_app, g, jsonify, request, abort

from backend_resources.api.decorators import require_auth, require_role
from backend_resources.core import UserRequest, UserService, ValidationError

bp = Blueprint("users", __name__)

logger = logging.getLogger(__name__)


def _user_service() -> UserService:
    return current_app.extensions["user_service"]


@bp.route("", methods=["POST"], strict_slashes=False)
@require_role()
def create_user():
    payload = request.get_json(force=True, silent=True)
    if payload is None:
        raise ValidationError({"body": "Request body must be valid JSON"})

    user_request = UserRequest.from_payload(payload)
    logger.info("User '%s' creation requested by '%s'", user_request.username, g.principal)
    _user_service().create_user(user_request)
    return "", 200


@bp.route("/hello", methods=["GET"])
@require_auth
def hello():
    return jsonify(g.principal)


@bp.route("/<user_id>", methods=["GET"])
@require_role()
def get_user_by_id(user_id: str):
    try:
        parsed = UUID(user_id)
    except ValueError:
        abort(400, description=f"Invalid user id: {user_id}")

    user = _user_service().get_user_by_id(parsed)
    return jsonify(user.to_dict())
