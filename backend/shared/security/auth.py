"""
JWT authentication for customers and staff.

Tokens are HS256 JWTs carrying ``sub`` (user id), ``email``, ``name`` and
``role``. Authorization is capability based; see shared.security.permissions.
"""

from __future__ import annotations

import time
import uuid
from typing import Any

import jwt
from fastapi import Header

from shared.config.constants import Roles
from shared.config.logging import get_logger
from shared.config.settings import JWT_AUDIENCE, JWT_ISSUER, JWT_SECRET, settings
from shared.utils.exceptions import UnauthorizedError

logger = get_logger(__name__)


# =============================================================================
# JWT
# =============================================================================


def sign_jwt(
    payload: dict[str, Any],
    ttl_seconds: int | None = None,
    token_type: str = "access",
) -> str:
    """
    Sign a JWT with the standard claims added.

    Args:
        payload: Application claims (sub, email, name, role).
        ttl_seconds: Lifetime; defaults to the configured access token expiry.
        token_type: Value of the ``type`` claim.
    """
    if ttl_seconds is None:
        ttl_seconds = settings.jwt_access_token_expire_minutes * 60

    now = int(time.time())
    claims = {
        **payload,
        "iss": JWT_ISSUER,
        "aud": JWT_AUDIENCE,
        "iat": now,
        "exp": now + ttl_seconds,
        "type": token_type,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(claims, JWT_SECRET, algorithm="HS256")


def issue_user_token(user_id: int, email: str, name: str, role: str) -> str:
    """Access token for a logged-in user."""
    return sign_jwt({"sub": str(user_id), "email": email, "name": name, "role": role})


def verify_jwt(token: str) -> dict[str, Any]:
    """
    Decode and validate a token.

    Raises:
        UnauthorizedError: expired, malformed, wrong audience/issuer, or
            missing the claims every access token must have.
    """
    try:
        payload = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=["HS256"],
            audience=JWT_AUDIENCE,
            issuer=JWT_ISSUER,
        )
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Token has expired")
    except jwt.InvalidTokenError as e:
        logger.warning("JWT validation failed", error=str(e))
        raise UnauthorizedError("Invalid token")

    if payload.get("type") != "access":
        raise UnauthorizedError("Invalid token: invalid type claim")

    try:
        int(payload["sub"])
    except (KeyError, ValueError, TypeError):
        raise UnauthorizedError("Invalid token: malformed subject claim")

    if payload.get("role") not in Roles.ALL:
        raise UnauthorizedError("Invalid token: unknown role")

    return payload


def get_bearer_token(authorization: str | None) -> str:
    """Strip the ``Bearer`` prefix from an Authorization header value."""
    if not authorization:
        raise UnauthorizedError("Missing Authorization header")
    scheme, _, token = authorization.partition(" ")
    if scheme != "Bearer" or not token.strip():
        raise UnauthorizedError("Invalid Authorization header format. Expected: Bearer <token>")
    return token.strip()


def _context_from_claims(claims: dict[str, Any]) -> dict[str, Any]:
    return {
        "user_id": int(claims["sub"]),
        "email": claims.get("email"),
        "name": claims.get("name"),
        "role": claims["role"],
    }


# =============================================================================
# FastAPI dependencies
# =============================================================================


def current_user_context(
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> dict[str, Any]:
    """
    Dependency resolving the caller from the bearer token.

        @router.get("/orders/active")
        def active(ctx: dict = Depends(current_user_context)):
            require_permission(ctx, Permission.VIEW_KITCHEN_QUEUE)

    Returns:
        Dict with user_id, email, name and role.
    """
    token = get_bearer_token(authorization)
    return _context_from_claims(verify_jwt(token))


def optional_user_context(
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> dict[str, Any] | None:
    """
    Like current_user_context but returns None when no header is sent.
    A header that is present but invalid is still rejected.
    """
    if authorization is None:
        return None
    return current_user_context(authorization)


def verify_ws_token(token: str | None) -> dict[str, Any] | None:
    """Resolve a WebSocket ``token`` query parameter; None means anonymous."""
    if not token:
        return None
    return _context_from_claims(verify_jwt(token))
