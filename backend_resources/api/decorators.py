"""
Flask decorators for authentication and authorization.

Callers present a Keycloak-issued access token as an OAuth 2.0 Bearer
token (RFC 6750). The token is verified against the realm's JWKS and the
caller's roles are read from its realm_access / resource_access claims.

Guards:
- require_auth: any valid token (401 otherwise)
- require_role: valid token holding a role (401 / 403 otherwise)
"""

import logging
from functools import wraps
from typing import Optional, List, Dict, Any

import jwt
from jwt import PyJWKClient
from jwt.exceptions import (
    PyJWTError,
    ExpiredSignatureError,
    InvalidIssuerError,
    InvalidAudienceError,
    InvalidSignatureError,
    DecodeError,
)
from flask import request, current_app, g, abort

logger = logging.getLogger(__name__)

# Global JWKS client (cached singleton)
_jwks_client: Optional[PyJWKClient] = None


class TokenValidationError(Exception):
    """Exception raised when JWT token validation fails."""
    pass


def get_jwks_client() -> PyJWKClient:
    """
    Get cached JWKS client (singleton pattern).

    The client fetches Keycloak's public keys from the realm certs endpoint
    and caches them; the kid in the JWT header selects the key.
    """
    global _jwks_client

    if _jwks_client is None:
        cfg = current_app.config["APP_CONFIG"]
        jwks_url = f"{cfg.keycloak_server_url}/protocol/openid-connect/certs"

        logger.info("Initializing JWKS client for: %s", jwks_url)

        _jwks_client = PyJWKClient(
            jwks_url,
            cache_keys=True,
            max_cached_keys=16,
            lifespan=3600,
            headers={"User-Agent": "backend-resources/1.0"},
            timeout=int(cfg.request_timeout),
        )

    return _jwks_client


def validate_jwt_token(token: str) -> Dict[str, Any]:
    """
    Validate JWT Bearer token.

    Validations performed:
    1. Signature verification (RS256 via JWKS)
    2. Expiration (exp claim) and not-before (nbf claim)
    3. Issuer (iss claim)
    4. Audience (aud claim), only when TOKEN_AUDIENCE is configured

    Args:
        token: JWT token string (without "Bearer " prefix)

    Returns:
        dict: Validated token claims

    Raises:
        TokenValidationError: If any validation fails
    """
    cfg = current_app.config["APP_CONFIG"]

    try:
        signing_key = get_jwks_client().get_signing_key_from_jwt(token)

        options = {
            "verify_signature": True,
            "verify_exp": True,
            "verify_nbf": True,
            "verify_iss": True,
            "verify_aud": bool(cfg.token_audience),
            "require": ["exp", "iat"],
        }
        claims = jwt.decode(
            token,
            signing_key.key,
            algorithms=["RS256"],
            issuer=cfg.keycloak_issuer,
            audience=cfg.token_audience or None,
            options=options,
            leeway=5,
        )
        logger.debug("JWT validated for subject: %s", claims.get("sub"))
        return claims

    except ExpiredSignatureError:
        raise TokenValidationError("Token expired (exp claim)")
    except InvalidIssuerError as e:
        raise TokenValidationError(f"Invalid issuer (token from wrong Keycloak realm): {e}")
    except InvalidAudienceError as e:
        raise TokenValidationError(f"Invalid audience (token not for this API): {e}")
    except InvalidSignatureError:
        raise TokenValidationError("Invalid signature (token tampered or wrong key)")
    except DecodeError as e:
        raise TokenValidationError(f"Token decode error (malformed JWT): {e}")
    except PyJWTError as e:
        logger.error("JWT validation failed: %s", e)
        raise TokenValidationError(f"Token validation failed: {e}")


def _role_list(access: Any) -> List[str]:
    """Roles of one realm_access / resource_access entry; malformed claims yield none."""
    if not isinstance(access, dict):
        return []
    roles = access.get("roles")
    if not isinstance(roles, list):
        return []
    return [role for role in roles if isinstance(role, str)]


def collect_roles(claims: Dict[str, Any]) -> List[str]:
    """Collect realm and client roles from access token claims, first occurrence wins."""
    roles: List[str] = []
    sources = [claims.get("realm_access")]
    resource_access = claims.get("resource_access")
    if isinstance(resource_access, dict):
        sources.extend(resource_access.values())
    for access in sources:
        for role in _role_list(access):
            if role not in roles:
                roles.append(role)
    return roles


def _normalize_role(role: str) -> str:
    role = role.strip().lower()
    return role[5:] if role.startswith("role_") else role


def has_role(roles: List[str], required: str) -> bool:
    """Case-insensitive role check; a ROLE_ prefix is ignored."""
    wanted = _normalize_role(required)
    return any(isinstance(role, str) and _normalize_role(role) == wanted for role in roles)


def principal_name(claims: Dict[str, Any]) -> str:
    """Name of the authenticated principal: preferred_username, else sub."""
    return claims.get("preferred_username") or claims.get("sub") or ""


def _authenticate() -> Dict[str, Any]:
    """Validate the Bearer token of the current request and publish it on g."""
    auth_header = request.headers.get("Authorization", "")

    if not auth_header:
        abort(401, description="Authorization header required. Use 'Authorization: Bearer <token>'")

    if not auth_header.startswith("Bearer "):
        logger.warning("Request with invalid Authorization format on %s", request.path)
        abort(401, description="Invalid Authorization header format. Expected 'Bearer <token>'")

    token = auth_header[7:].strip()
    if not token:
        abort(401, description="Bearer token is empty")

    try:
        claims = validate_jwt_token(token)
    except TokenValidationError as e:
        logger.warning("JWT validation failed: %s", e)
        abort(401, description=str(e))

    g.jwt_claims = claims
    g.principal = principal_name(claims)
    g.roles = collect_roles(claims)
    return claims


def require_auth(fn):
    """Decorator: require a valid Bearer token (401 otherwise)."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        _authenticate()
        return fn(*args, **kwargs)
    return wrapper


def require_role(role: Optional[str] = None):
    """
    Decorator: require a valid Bearer token carrying a role.

    Args:
        role: Role name; defaults to the configured moderator role

    Raises:
        401 Unauthorized: Missing, invalid, or expired token
        403 Forbidden: Token valid but role missing

    Example:
        @bp.route("/users", methods=["POST"])
        @require_role()
        def create_user():
            ...
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            _authenticate()
            required = role or current_app.config["APP_CONFIG"].moderator_role
            if not has_role(g.roles, required):
                logger.warning("Principal '%s' lacks role '%s' for %s", g.principal, required, request.path)
                abort(403, description=f"Required role: {required}")
            return fn(*args, **kwargs)
        return wrapper
    return decorator
