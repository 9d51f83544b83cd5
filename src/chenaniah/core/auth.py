"""
Authentication and Authorization Module

Provides authentication dependencies for FastAPI endpoints.
This module handles JWT token validation and role-based access control
using the security utilities defined in security.py.

Roles:
- admin: full access
- coordinator: appointment attendance/approval, decisions (if configured)
- judge: interview evaluations
- student: own account only

SECURITY NOTE:
- Development mode auth bypass is ONLY enabled when PYTHON_ENV=development
- Production environments MUST set PYTHON_ENV=production to disable test tokens
"""

import logging
import os
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from chenaniah.core.config import settings
from chenaniah.core.security import decode_token

logger = logging.getLogger(__name__)

# Security scheme for OpenAPI documentation
security = HTTPBearer(
    auto_error=False,
    description="JWT Bearer token for authentication",
)

STAFF_ROLES = ("admin", "coordinator", "judge")


@dataclass
class CurrentUser:
    """
    Represents an authenticated caller.

    Populated from JWT claims after token validation.

    Attributes:
        id: Token subject (username for staff, student id for students)
        username: Login name
        role: One of admin, coordinator, judge, student
    """

    id: str
    username: str
    role: str

    def __str__(self) -> str:
        return f"CurrentUser(id={self.id}, username={self.username}, role={self.role})"


def _is_dev_mode_safe() -> bool:
    """
    Check if development mode is safe to enable.

    Requires PYTHON_ENV=development in settings and the raw environment
    variable to not name production or staging.
    """
    env_var = os.getenv("PYTHON_ENV", "").lower()

    is_safe = (
        settings.is_development
        and not settings.is_production
        and env_var not in ("production", "staging")
    )

    if is_safe:
        logger.warning(
            "SECURITY: Development auth mode is ENABLED. This MUST NOT be used in production!"
        )

    return is_safe


# Development mode flag - allows the fixed test token for LOCAL testing ONLY
_DEVELOPMENT_MODE = _is_dev_mode_safe()

_DEV_ADMIN = CurrentUser(id="dev-admin", username="dev-admin", role="admin")


def _unauthorized(code: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": message, "code": code},
        headers={"WWW-Authenticate": "Bearer"},
    )


def validate_token(token: str) -> CurrentUser:
    """
    Validate a JWT and extract the caller's claims.

    Args:
        token: JWT token string from the Authorization header

    Returns:
        CurrentUser built from the token claims

    Raises:
        HTTPException 401: If the token is invalid, expired or missing claims
    """
    if _DEVELOPMENT_MODE and token == "dev-token":
        logger.debug("Development mode: Using test token")
        return _DEV_ADMIN

    payload = decode_token(token)

    if payload is None:
        logger.warning("Invalid or expired JWT token")
        raise _unauthorized("INVALID_TOKEN", "Invalid or expired token")

    if payload.get("type", "access") != "access":
        logger.warning(f"Invalid token type: {payload.get('type')}")
        raise _unauthorized("INVALID_TOKEN_TYPE", "This endpoint requires an access token")

    subject = payload.get("sub")
    role = payload.get("role")
    if not subject or not role:
        logger.warning("Token is missing 'sub' or 'role' claim")
        raise _unauthorized("INVALID_TOKEN_CLAIMS", "Token contains invalid or missing claims")

    return CurrentUser(
        id=str(subject),
        username=payload.get("username") or str(subject),
        role=role,
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> CurrentUser:
    """
    FastAPI dependency that validates the bearer token.

    Raises:
        HTTPException 401: If the token is missing, invalid, or expired
    """
    if credentials is None:
        raise _unauthorized("TOKEN_MISSING", "Token is missing")

    return validate_token(credentials.credentials)


def require_roles(*roles: str) -> Callable[..., Awaitable[CurrentUser]]:
    """
    Build a dependency that only admits callers holding one of ``roles``.

    Usage:
        @router.put("/appointments/{id}/approve")
        async def approve(user: CurrentUser = Depends(require_roles("coordinator", "admin"))):
            ...
    """
    allowed = frozenset(roles)

    async def dependency(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in allowed:
            logger.warning(
                f"Access denied: {user.username} has role '{user.role}', "
                f"required one of {sorted(allowed)}"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={"error": "Insufficient permissions", "code": "FORBIDDEN"},
            )
        return user

    return dependency


# Any staff member
get_staff_user = require_roles(*STAFF_ROLES)


async def get_decision_maker(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Admit callers whose role is listed in DECISION_ROLES."""
    if user.role not in settings.decision_roles_list:
        logger.warning(f"Decision denied for {user.username} (role '{user.role}')")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"error": "Insufficient permissions", "code": "FORBIDDEN"},
        )
    return user


__all__ = [
    "CurrentUser",
    "STAFF_ROLES",
    "get_current_user",
    "get_decision_maker",
    "get_staff_user",
    "require_roles",
    "validate_token",
]
