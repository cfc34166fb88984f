"""
Database connection and session management.

SQLAlchemy 2.0 async pattern:
- Engine: manages the connection pool
- Session factory: creates database sessions
- Base: parent class for all our ORM models

Engine and session factory are created per application (see main.create_app)
and stored on ``app.state``, so a test host can swap the database out.
"""

from collections.abc import AsyncIterator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from todo_api.core.config import Settings


# =============================================================================
# DATABASE ENGINE
# =============================================================================
# - echo=settings.debug: when True, logs all SQL statements (useful for debugging)
# - pool_pre_ping=True: tests connections before using them (handles stale connections)


def create_engine_for(settings: Settings) -> AsyncEngine:
    """Create the async engine for the configured database URL."""
    return create_async_engine(
        settings.database_url,
        echo=settings.debug,
        pool_pre_ping=True,
    )


# =============================================================================
# SESSION FACTORY
# =============================================================================
# - expire_on_commit=False: objects remain usable after commit
#   (without this, accessing attributes after commit would trigger a refresh)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to `engine`."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# =============================================================================
# BASE MODEL CLASS
# =============================================================================


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


async def create_schema(engine: AsyncEngine) -> None:
    """
    Create every table known to the ORM, skipping the ones that exist.

    The models package must be imported first so its tables are registered
    on Base.metadata.
    """
    # Imported for its side effect of registering the tables
    import todo_api.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# =============================================================================
# DEPENDENCY: GET DATABASE SESSION
# =============================================================================
# How it works:
# 1. When a request comes in, FastAPI calls this function
# 2. `async with` opens a session from the application's session factory
# 3. `yield` gives the session to the route handler
# 4. After the route finishes, the `async with` block closes the session
#
# Tests replace this dependency through app.dependency_overrides.


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """
    Dependency that provides a database session.

    Usage in a route:
        @router.get("/todos")
        async def list_todos(db: AsyncSession = Depends(get_db)):
            # use db here
    """
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        yield session
