"""
In-process test host for the Todo API.

TodoApplication boots the application against an in-memory SQLite database,
mints signed JWTs for simulated users and hands out HTTP clients that send
the token with every request:

    async with TodoApplication() as application:
        async with application.create_todo_db() as db:
            db.add(User(id="34", username="todouser"))
            await db.commit()

        client = application.create_client("34")
        response = await client.get("/todos")

Configuration problems (a missing issuer or key) fail the calling test with
an AssertionError.
"""

import base64
import secrets
import uuid
from collections.abc import AsyncIterator, Callable, Generator
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import httpx
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from todo_api.core.config import Settings, SigningKey
from todo_api.core.db import create_schema, create_session_factory, get_db
from todo_api.core.security import (
    ADMIN_ROLE,
    BEARER_SCHEME,
    USER_JWTS_ISSUER,
    JwtIssuer,
    TokenOptions,
    decode_signing_key,
)
from todo_api.main import create_app

IN_MEMORY_DATABASE_URL = "sqlite+aiosqlite://"

# 256-bit signing key
SIGNING_KEY_BYTES = 32

TOKEN_LIFETIME = timedelta(days=1)


# =============================================================================
# REQUEST HOOK
# =============================================================================


class BearerTokenAuth(httpx.Auth):
    """
    httpx auth flow that lets a callback edit each request before it is sent.

    The callback runs once per request, so a fresh token can be minted
    every time.
    """

    def __init__(self, on_request: Callable[[httpx.Request], None]):
        self._on_request = on_request

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        self._on_request(request)
        yield request


# =============================================================================
# TEST HOST
# =============================================================================


class TodoApplication:
    """
    The Todo API running in-process, with its database and signing key replaced.

    - The database is a single in-memory SQLite connection (StaticPool), kept
      open for the lifetime of the host; closing it drops the data.
    - A random 256-bit key is injected as bearer signing key 0, so tokens can
      be minted without any external key tooling.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self._base_settings = settings
        self._app: Optional[FastAPI] = None
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None
        self._clients: list[httpx.AsyncClient] = []
        self._schema_created = False
        self._closed = False

    async def __aenter__(self) -> "TodoApplication":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # -------------------------------------------------------------------------
    # Host
    # -------------------------------------------------------------------------

    @property
    def app(self) -> FastAPI:
        """The application, created on first access."""
        return self._ensure_host()

    @property
    def settings(self) -> Settings:
        """The configuration the application runs with."""
        return self.app.state.settings

    async def start(self) -> None:
        """Create the host and the database schema."""
        self._ensure_host()
        await self._ensure_schema()

    def _ensure_host(self) -> FastAPI:
        if self._closed:
            raise RuntimeError("TodoApplication is closed")
        if self._app is None:
            self._app = self._create_host()
        return self._app

    async def _ensure_schema(self) -> None:
        """Create the tables on first use of the host's database."""
        if not self._schema_created:
            await create_schema(self._engine)
            self._schema_created = True

    def _create_host(self) -> FastAPI:
        # The in-memory database lives as long as this one connection
        self._engine = create_async_engine(
            IN_MEMORY_DATABASE_URL,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        self._session_factory = create_session_factory(self._engine)

        app = create_app(self._configure_settings(self._base_settings or Settings()))

        # Route every request's session to the in-memory database
        async def get_test_db() -> AsyncIterator[AsyncSession]:
            await self._ensure_schema()
            async with self._session_factory() as session:
                yield session

        app.dependency_overrides[get_db] = get_test_db
        return app

    def _configure_settings(self, settings: Settings) -> Settings:
        """
        Return a copy of `settings` with a fresh signing key 0.

        Signing keys after the first are kept as configured. The copy is deep,
        so changes made through the host never reach the caller's settings.
        """
        settings = settings.model_copy(deep=True)
        base64_key = base64.b64encode(secrets.token_bytes(SIGNING_KEY_BYTES)).decode("ascii")

        bearer = settings.bearer
        bearer.signing_keys = [
            SigningKey(issuer=USER_JWTS_ISSUER, value=base64_key),
            *bearer.signing_keys[1:],
        ]
        settings.database_url = IN_MEMORY_DATABASE_URL

        return settings

    async def aclose(self) -> None:
        """
        Close every client and dispose the database connection.

        The host cannot be used afterwards; create a new TodoApplication instead.
        """
        self._closed = True

        for client in self._clients:
            await client.aclose()
        self._clients.clear()

        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None

        if self._app is not None:
            # Never connected, but owned by the application
            await self._app.state.engine.dispose()
            self._app = None

    # -------------------------------------------------------------------------
    # Database
    # -------------------------------------------------------------------------

    @asynccontextmanager
    async def create_todo_db(self) -> AsyncIterator[AsyncSession]:
        """
        Open a session on the host's database, creating the schema first.

        Usage:
            async with application.create_todo_db() as db:
                db.add(User(id="34", username="todouser"))
                await db.commit()
        """
        self._ensure_host()
        await self._ensure_schema()
        async with self._session_factory() as session:
            yield session

    # -------------------------------------------------------------------------
    # Clients
    # -------------------------------------------------------------------------

    def create_default_client(self, **kwargs: Any) -> httpx.AsyncClient:
        """Create a client for the in-process application, with no token."""
        client = httpx.AsyncClient(
            transport=httpx.ASGITransport(app=self.app),
            base_url="http://test",
            **kwargs,
        )
        self._clients.append(client)
        return client

    def create_client(self, user_id: str, is_admin: bool = False) -> httpx.AsyncClient:
        """
        Create a client that authenticates every request as `user_id`.

        Args:
            user_id: Value of the token's "id" claim
            is_admin: Whether the token carries the "admin" role
        """

        def authorize(request: httpx.Request) -> None:
            token = self.create_token(user_id, is_admin)
            request.headers["Authorization"] = f"{BEARER_SCHEME} {token}"

        return self.create_default_client(auth=BearerTokenAuth(authorize))

    # -------------------------------------------------------------------------
    # Tokens
    # -------------------------------------------------------------------------

    def create_token(self, user_id: str, is_admin: bool = False) -> str:
        """
        Mint a signed token for `user_id`, valid for one day.

        Issuer, key and audiences are read from the application's bearer
        configuration, the same values the application validates against.
        """
        bearer = self.settings.bearer

        assert bearer.signing_keys, "No bearer signing keys configured"
        signing_key = bearer.signing_keys[0]

        assert signing_key.issuer is not None, "Bearer signing key 0 has no issuer"
        assert signing_key.value is not None, "Bearer signing key 0 has no value"

        jwt_issuer = JwtIssuer(signing_key.issuer, decode_signing_key(signing_key.value))

        roles = []
        if is_admin:
            roles.append(ADMIN_ROLE)

        now = datetime.now(timezone.utc)
        claims = jwt_issuer.create(
            TokenOptions(
                scheme=BEARER_SCHEME,
                name=str(uuid.uuid4()),
                audiences=list(bearer.valid_audiences),
                issuer=jwt_issuer.issuer,
                not_before=now,
                expires_on=now + TOKEN_LIFETIME,
                roles=roles,
                scopes=[],
                claims={"id": user_id},
            )
        )

        return jwt_issuer.write_token(claims)
