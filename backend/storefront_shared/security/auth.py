"""
Authentication and authorization utilities.
Admin panel users authenticate with HS256 JWT bearer tokens issued by the
storefront's identity provider; this module only verifies them.
"""

from __future__ import annotations

import time
import uuid
from typing import Any

import jwt
from fastapi import Depends, Header, HTTPException, status

from storefront_shared.config.constants import MANAGEMENT_ROLES, Roles
from storefront_shared.config.logging import get_logger
from storefront_shared.config.settings import settings

logger = get_logger(__name__)


def sign_jwt(payload: dict[str, Any], ttl_seconds: int | None = None) -> str:
    """
    Sign an access token with the given payload.

    Args:
        payload: Claims to include in the token (sub, email, roles).
        ttl_seconds: Token lifetime in seconds. Defaults to the configured expiry.

    Returns:
        Signed JWT token string.
    """
    if ttl_seconds is None:
        ttl_seconds = settings.jwt_access_token_expire_minutes * 60

    now = int(time.time())
    data = {
        **payload,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": now,
        "exp": now + ttl_seconds,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(data, settings.jwt_secret, algorithm="HS256")


def verify_jwt(token: str) -> dict[str, Any]:
    """
    Verify and decode an access token.

    Raises:
        HTTPException: If token is invalid, expired, or lacks a subject.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=["HS256"],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
        )
    except jwt.InvalidTokenError as e:
        # Log the actual error, return a generic message to the client
        logger.warning("JWT validation failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        )

    if not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: missing subject claim",
        )
    if not isinstance(payload.get("roles", []), list):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: malformed roles claim",
        )
    return payload


def get_bearer_token(authorization: str | None) -> str:
    """
    Extract bearer token from Authorization header.

    Raises:
        HTTPException: If header is missing or malformed.
    """
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing Authorization header",
        )

    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid Authorization header format. Expected: Bearer <token>",
        )

    return authorization.split(" ", 1)[1].strip()


def current_user(
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> dict[str, Any]:
    """
    FastAPI dependency to get the current user context from the JWT.

    Returns:
        Dict with: sub (user id), email, roles
    """
    token = get_bearer_token(authorization)
    return verify_jwt(token)


def require_roles(ctx: dict[str, Any], allowed: list[str] | frozenset[str]) -> None:
    """
    Verify that the user has at least one of the allowed roles.

    Raises:
        HTTPException: If user lacks required role.
    """
    user_roles = set(ctx.get("roles", []))
    if not user_roles.intersection(set(allowed)):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Insufficient permissions. Required role: one of {sorted(allowed)}",
        )


def require_admin(user: dict = Depends(current_user)) -> dict:
    """Dependency that requires the ADMIN role (mutations)."""
    require_roles(user, [Roles.ADMIN])
    return user


def require_management(user: dict = Depends(current_user)) -> dict:
    """Dependency that requires ADMIN or MANAGER (read access to admin data)."""
    require_roles(user, MANAGEMENT_ROLES)
    return user


def get_user_id(user: dict[str, Any]) -> str | None:
    """Actor identifier recorded as performed_by."""
    sub = user.get("sub")
    return str(sub) if sub is not None else None


def get_user_email(user: dict[str, Any]) -> str | None:
    """Actor email recorded as performed_by_email."""
    return user.get("email")
