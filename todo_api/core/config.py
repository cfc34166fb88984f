"""
Application configuration loaded from environment variables.

Uses pydantic-settings to automatically read from environment
and provide type validation.

Bearer authentication lives under a fixed nested path,
``authentication.schemes.bearer``. Nested values are set from the
environment with a double underscore, for example:

    AUTHENTICATION__SCHEMES__BEARER__VALID_AUDIENCES='["http://localhost:8000"]'
    AUTHENTICATION__SCHEMES__BEARER__SIGNING_KEYS='[{"issuer": "user-jwts", "value": "..."}]'
"""

from typing import Optional

from fastapi import Request
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# =============================================================================
# BEARER AUTHENTICATION
# =============================================================================


class SigningKey(BaseModel):
    """
    A symmetric key used to sign and verify bearer tokens.

    Attributes:
        issuer: The "iss" value of tokens signed with this key
        value: The raw key bytes, base64 encoded
    """

    issuer: Optional[str] = None
    value: Optional[str] = None


class BearerSchemeSettings(BaseModel):
    """Settings for the "Bearer" authentication scheme."""

    valid_audiences: list[str] = Field(
        default_factory=lambda: ["http://localhost:8000"],
    )
    signing_keys: list[SigningKey] = Field(default_factory=list)

    def signing_key_for(self, issuer: Optional[str]) -> Optional[SigningKey]:
        """Return the first signing key issued by `issuer`, if any."""
        for key in self.signing_keys:
            if key.issuer == issuer:
                return key
        return None


class AuthenticationSchemes(BaseModel):
    bearer: BearerSchemeSettings = Field(default_factory=BearerSchemeSettings)


class AuthenticationSettings(BaseModel):
    schemes: AuthenticationSchemes = Field(default_factory=AuthenticationSchemes)


# =============================================================================
# APPLICATION SETTINGS
# =============================================================================


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./todos.db"

    # JWT Authentication
    authentication: AuthenticationSettings = Field(default_factory=AuthenticationSettings)
    access_token_expire_minutes: int = 60

    # Application
    debug: bool = False
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        # Load from .env file if present
        env_file=".env",
        # Environment variables are case-insensitive
        case_sensitive=False,
        # AUTHENTICATION__SCHEMES__BEARER__... maps onto the nested models
        env_nested_delimiter="__",
    )

    @property
    def bearer(self) -> BearerSchemeSettings:
        """Shortcut for ``authentication.schemes.bearer``."""
        return self.authentication.schemes.bearer


# =============================================================================
# DEPENDENCY: GET SETTINGS
# =============================================================================
# Each application instance carries its own settings on app.state, so a test
# host can build the app with injected configuration.


def get_settings(request: Request) -> Settings:
    """Dependency that returns the settings of the running application."""
    return request.app.state.settings
