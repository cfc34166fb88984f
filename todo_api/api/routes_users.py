"""
User routes: register and get a token.

These endpoints handle:
- User registration (create new account)
- Token issuance (authenticate with username/password and get a JWT)
"""

import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from todo_api.core.config import Settings, get_settings
from todo_api.core.db import get_db
from todo_api.core.security import (
    BEARER_SCHEME,
    JwtIssuer,
    TokenOptions,
    decode_signing_key,
    hash_password,
    verify_password,
)
from todo_api.models import User
from todo_api.schemas.auth import (
    TokenResponse,
    UserLoginRequest,
    UserRegisterRequest,
    UserResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/users",
    tags=["Users"],
)


# =============================================================================
# REGISTER ENDPOINT
# =============================================================================


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="Create a new user account with username and password.",
)
async def register(
    request: UserRegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Register a new user.

    Raises:
        409 Conflict: If the username is taken
    """
    query = select(User).where(User.username == request.username)
    result = await db.execute(query)

    if result.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A user with this username already exists",
        )

    user = User(
        username=request.username,
        password_hash=hash_password(request.password),
    )

    db.add(user)
    await db.commit()

    # Refresh to get generated fields (created_at)
    await db.refresh(user)

    logger.info("Registered user %s", user.id)
    return user


# =============================================================================
# TOKEN ENDPOINT
# =============================================================================


def issue_access_token(user: User, settings: Settings) -> str:
    """
    Create a bearer token for `user`, signed with the first configured key.

    Raises:
        503 Service Unavailable: If no usable signing key is configured
    """
    bearer = settings.bearer
    signing_key = bearer.signing_keys[0] if bearer.signing_keys else None

    if signing_key is None or not signing_key.issuer or not signing_key.value:
        logger.error("Cannot issue tokens: no signing key configured")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Token signing is not configured",
        )

    issuer = JwtIssuer(signing_key.issuer, decode_signing_key(signing_key.value))
    now = datetime.now(timezone.utc)

    claims = issuer.create(
        TokenOptions(
            scheme=BEARER_SCHEME,
            name=user.username,
            audiences=list(bearer.valid_audiences),
            issuer=issuer.issuer,
            not_before=now,
            expires_on=now + timedelta(minutes=settings.access_token_expire_minutes),
            claims={"id": user.id},
        )
    )
    return issuer.write_token(claims)


@router.post(
    "/token",
    response_model=TokenResponse,
    summary="Get an access token",
    description="Authenticate with username and password to receive a JWT token.",
)
async def create_token(
    request: UserLoginRequest,
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db),
) -> TokenResponse:
    """
    Authenticate user and return a JWT token.

    Raises:
        401 Unauthorized: If credentials are invalid
    """
    query = select(User).where(User.username == request.username)
    result = await db.execute(query)
    user = result.scalar_one_or_none()

    # Same error for unknown user, password-less user and wrong password
    if (
        user is None
        or user.password_hash is None
        or not verify_password(request.password, user.password_hash)
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = issue_access_token(user, settings)
    logger.info("Issued token for user %s", user.id)

    return TokenResponse(
        access_token=access_token,
        token_type="bearer",
    )
