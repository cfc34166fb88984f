"""
Pydantic schemas for user and token endpoints.

Pydantic automatically:
- Validates data types
- Returns 422 errors for invalid data
- Generates OpenAPI documentation
"""

from datetime import datetime

from pydantic import BaseModel, Field


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================


class UserRegisterRequest(BaseModel):
    """
    Request body for POST /users

    Example:
        {
            "username": "alice",
            "password": "securepassword123"
        }
    """

    username: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Unique login name",
        examples=["alice"],
    )

    # Password with minimum length validation
    password: str = Field(
        ...,
        min_length=8,
        description="Password (minimum 8 characters)",
        examples=["securepassword123"],
    )


class UserLoginRequest(BaseModel):
    """Request body for POST /users/token"""

    username: str = Field(
        ...,
        description="Login name",
        examples=["alice"],
    )

    password: str = Field(
        ...,
        description="User's password",
        examples=["securepassword123"],
    )


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================


class UserResponse(BaseModel):
    """
    User information returned after registration.

    Note: the password hash is never returned.
    """

    id: str
    username: str
    created_at: datetime

    model_config = {"from_attributes": True}


class TokenResponse(BaseModel):
    """
    Response body for POST /users/token

    Follows OAuth2 convention for token responses.

    Example:
        {
            "access_token": "eyJhbGciOiJIUzI1NiIs...",
            "token_type": "bearer"
        }
    """

    access_token: str = Field(
        ...,
        description="JWT access token",
    )

    token_type: str = Field(
        default="bearer",
        description="Token type (always 'bearer')",
    )
