"""
FastAPI dependencies for route handlers.

The most common use case is authentication: checking the JWT bearer token
and returning the current user.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.core.config import Settings, get_settings
from todo_api.core.db import get_db
from todo_api.core.security import ADMIN_ROLE, decode_access_token, token_roles
from todo_api.models import User


# =============================================================================
# HTTP BEARER SCHEME
# =============================================================================
# This tells FastAPI to expect an "Authorization: Bearer <token>" header.
# auto_error=False: a missing header is reported as 401 by get_current_user
# rather than by FastAPI itself.

security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


# =============================================================================
# GET CURRENT USER
# =============================================================================


@dataclass
class CurrentUser:
    """The authenticated caller of a request."""

    user: User
    is_admin: bool = False

    @property
    def id(self) -> str:
        return self.user.id


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    """
    Extract and validate the JWT token, return the authenticated user.

    Flow:
    1. Extract token from Authorization header
    2. Decode and validate JWT against the configured signing keys
    3. Read the user id from the "id" claim
    4. Fetch user from database
    5. Read the roles; "admin" grants access to every todo

    Raises:
        401 Unauthorized: If the token is missing, invalid or has no "id" claim
        403 Forbidden: If the token is valid but names no known user
    """
    if credentials is None:
        raise _unauthorized("Not authenticated")

    payload = decode_access_token(credentials.credentials, settings.bearer)
    if payload is None:
        raise _unauthorized("Invalid or expired token")

    user_id = payload.get("id")
    if user_id is None:
        raise _unauthorized("Token has no user id")

    user = await db.get(User, str(user_id))
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unknown user",
        )

    return CurrentUser(user=user, is_admin=ADMIN_ROLE in token_roles(payload))
