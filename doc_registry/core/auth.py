"""
Authentication

Provides FastAPI dependencies that resolve the calling user.
Supports JWT bearer token authentication (header or cookie). The resolved
UserPrincipal is passed explicitly into every registry operation.
"""

import logging
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from doc_registry.config import get_settings
from doc_registry.core.security import decode_token
from doc_registry.models.enums import UserRole

logger = logging.getLogger(__name__)

# HTTP Bearer token scheme
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class UserPrincipal:
    """
    Authenticated user principal.

    Represents an authenticated caller: the username documents are owned by
    and shared with, plus the admin flag.
    """

    username: str
    name: str = ""
    role: UserRole = UserRole.MEMBER

    @property
    def is_admin(self) -> bool:
        """Check if the caller has system administrator rights."""
        return self.role == UserRole.ADMIN


def principal_from_claims(payload: dict) -> UserPrincipal | None:
    """
    Build a principal from decoded token claims.

    Usernames listed in the admin_usernames setting are promoted to admin
    regardless of the role claim.

    Args:
        payload: Decoded JWT payload

    Returns:
        UserPrincipal, or None if the token carries no username
    """
    username = payload.get("sub")
    if not username or not isinstance(username, str):
        return None

    role_str = payload.get("role", UserRole.MEMBER.value)
    try:
        role = UserRole(role_str)
    except ValueError:
        role = UserRole.MEMBER

    if username in get_settings().admin_usernames_list:
        role = UserRole.ADMIN

    return UserPrincipal(
        username=username,
        name=payload.get("name", ""),
        role=role,
    )


async def get_current_user_optional(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> UserPrincipal | None:
    """
    Get the current user from a JWT (optional).

    Checks for authentication in this order:
    1. Authorization: Bearer header (API clients)
    2. access_token cookie (browser clients)

    Returns None if no token is provided or the token is invalid.
    """
    token = None

    if credentials:
        token = credentials.credentials
    elif "access_token" in request.cookies:
        token = request.cookies["access_token"]

    if not token:
        return None

    payload = decode_token(token, expected_type="access")
    if payload is None:
        return None

    return principal_from_claims(payload)


async def get_current_user(
    user: Annotated[UserPrincipal | None, Depends(get_current_user_optional)],
) -> UserPrincipal:
    """
    Get the current user (required).

    Raises:
        HTTPException: 401 if no identity can be resolved
    """
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


# Type alias for dependency injection
CurrentUser = Annotated[UserPrincipal, Depends(get_current_user)]
