"""
Security utilities for authentication.

This module provides:
1. Password hashing (bcrypt) - secure password storage
2. JWT token creation - a small issuer in the style of local "user-jwts"
   tooling: subject, audiences, roles, scopes and custom claims
3. JWT token verification against the configured signing keys

Security principles:
- Never store plain text passwords
- Use industry-standard algorithms (bcrypt, HS256)
- Tokens expire; signature, issuer, audience and validity window are checked
"""

import base64
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

import bcrypt
from jose import JWTError, jwt

from todo_api.core.config import BearerSchemeSettings

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"

# Name of the authentication scheme, as sent in "Authorization: Bearer <token>"
BEARER_SCHEME = "Bearer"

# Issuer name used for locally generated signing keys
USER_JWTS_ISSUER = "user-jwts"

ADMIN_ROLE = "admin"


# =============================================================================
# PASSWORD HASHING
# =============================================================================
# We use bcrypt directly (not passlib).
# bcrypt.gensalt() creates a random salt, so the same password never hashes
# to the same value twice. The salt is stored inside the hash.


def hash_password(plain_password: str) -> str:
    """
    Hash a plain text password using bcrypt.

    Args:
        plain_password: The user's plain text password

    Returns:
        The bcrypt hash (store this in the database)
    """
    hashed = bcrypt.hashpw(plain_password.encode("utf-8"), bcrypt.gensalt())
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain text password against a stored hash.

    Args:
        plain_password: The password the user just typed
        hashed_password: The hash stored in the database

    Returns:
        True if password matches, False otherwise
    """
    return bcrypt.checkpw(
        plain_password.encode("utf-8"),
        hashed_password.encode("utf-8"),
    )


# =============================================================================
# JWT TOKEN CREATION
# =============================================================================
# Structure of a JWT: header.payload.signature (base64url encoded, dot-separated)
#
# TokenOptions describes the token; JwtIssuer turns it into a claim set and
# signs it with its key.


@dataclass
class TokenOptions:
    """
    Everything needed to describe a bearer token.

    Attributes:
        scheme: Authentication scheme the token is meant for ("Bearer")
        name: Subject of the token ("sub" claim)
        audiences: Intended recipients ("aud" claim)
        issuer: Who issued the token ("iss" claim)
        not_before: Start of the validity window ("nbf" claim)
        expires_on: End of the validity window ("exp" claim)
        roles: Role names ("role" claim)
        scopes: Scope names ("scope" claim, space separated)
        claims: Extra custom claims, e.g. {"id": "42"}
    """

    scheme: str
    name: str
    audiences: list[str]
    issuer: str
    not_before: datetime
    expires_on: datetime
    roles: list[str] = field(default_factory=list)
    scopes: list[str] = field(default_factory=list)
    claims: dict[str, str] = field(default_factory=dict)


class JwtIssuer:
    """
    Creates and signs JWTs with a symmetric key.

    Example:
        >>> issuer = JwtIssuer("user-jwts", key_bytes)
        >>> claims = issuer.create(options)
        >>> token = issuer.write_token(claims)
    """

    def __init__(self, issuer: str, signing_key: bytes):
        self.issuer = issuer
        self.signing_key = signing_key

    def create(self, options: TokenOptions) -> dict[str, Any]:
        """
        Build the claim set for a token.

        Datetime values are left as datetimes; jose converts "exp", "iat"
        and "nbf" to epoch seconds when the token is written.
        """
        claims: dict[str, Any] = {
            "sub": options.name,
            "unique_name": options.name,
            "jti": uuid.uuid4().hex,
            "iss": options.issuer,
            "nbf": options.not_before,
            "iat": datetime.now(timezone.utc),
            "exp": options.expires_on,
        }

        # A single audience is written as a plain string, several as a list
        if len(options.audiences) == 1:
            claims["aud"] = options.audiences[0]
        elif options.audiences:
            claims["aud"] = list(options.audiences)

        if options.roles:
            claims["role"] = list(options.roles)

        if options.scopes:
            claims["scope"] = " ".join(options.scopes)

        claims.update(options.claims)
        return claims

    def write_token(self, claims: dict[str, Any]) -> str:
        """Serialize and sign a claim set."""
        return jwt.encode(claims, self.signing_key, algorithm=JWT_ALGORITHM)


def decode_signing_key(value: str) -> bytes:
    """Decode a base64 signing key from configuration."""
    return base64.b64decode(value)


# =============================================================================
# JWT TOKEN VERIFICATION
# =============================================================================


def decode_access_token(
    token: str,
    bearer: BearerSchemeSettings,
) -> Optional[dict[str, Any]]:
    """
    Verify and decode a bearer token.

    Args:
        token: The JWT string from the Authorization header
        bearer: The bearer scheme configuration (signing keys, audiences)

    Returns:
        The decoded payload if valid, None if invalid/expired

    The signing key is chosen by the token's (unverified) issuer. jose then
    checks the signature, issuer, "exp" and "nbf". The audience is checked
    here because a token is accepted for any of several valid audiences.
    """
    try:
        unverified = jwt.get_unverified_claims(token)
    except JWTError:
        logger.debug("Rejected malformed bearer token")
        return None

    signing_key = bearer.signing_key_for(unverified.get("iss"))
    if signing_key is None or not signing_key.value:
        logger.debug("No signing key for issuer %r", unverified.get("iss"))
        return None

    try:
        payload = jwt.decode(
            token,
            decode_signing_key(signing_key.value),
            algorithms=[JWT_ALGORITHM],
            issuer=signing_key.issuer,
            options={"verify_aud": False},
        )
    except JWTError as exc:
        # Don't reveal why to the caller
        logger.debug("Rejected bearer token: %s", exc)
        return None

    if bearer.valid_audiences and not _has_valid_audience(payload, bearer.valid_audiences):
        logger.debug("Rejected bearer token with audience %r", payload.get("aud"))
        return None

    return payload


def _has_valid_audience(payload: dict[str, Any], valid_audiences: list[str]) -> bool:
    audiences = payload.get("aud")
    if audiences is None:
        return False
    if isinstance(audiences, str):
        audiences = [audiences]
    return any(audience in valid_audiences for audience in audiences)


def token_roles(payload: dict[str, Any]) -> list[str]:
    """Return the "role" claim as a list, whether it was written as one value or many."""
    roles = payload.get("role")
    if roles is None:
        return []
    if isinstance(roles, str):
        return [roles]
    return list(roles)
