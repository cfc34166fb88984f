"""
FastAPI application entry point.

This is where:
- The FastAPI app is created
- Routes are registered
- Startup/shutdown events are handled

Run with:
    uvicorn --factory todo_api.main:create_app

There is no module-level app instance, so importing this module (as the
test host does) reads no configuration and opens no database.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from todo_api import __version__
from todo_api.api.routes_todos import router as todos_router
from todo_api.api.routes_users import router as users_router
from todo_api.core.config import Settings
from todo_api.core.db import create_engine_for, create_schema, create_session_factory
from todo_api.core.logging_utils import configure_logging

logger = logging.getLogger(__name__)


# =============================================================================
# LIFESPAN MANAGEMENT
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Handle application startup and shutdown.

    Startup: configures logging, creates any missing tables
    Shutdown: closes the database connections
    """
    # --- STARTUP ---
    configure_logging(app.state.settings.log_level)
    logger.info("Starting Todo API...")
    await create_schema(app.state.engine)

    yield  # App runs while we're "inside" the yield

    # --- SHUTDOWN ---
    logger.info("Shutting down Todo API...")
    await app.state.engine.dispose()


# =============================================================================
# CREATE APPLICATION
# =============================================================================


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Configuration to run with; read from the environment if omitted

    Settings, engine and session factory are stored on app.state so that
    dependencies (get_settings, get_db) resolve them per application.
    """
    if settings is None:
        settings = Settings()

    app = FastAPI(
        title="Todo API",
        description="Todo items for authenticated users",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.state.settings = settings
    app.state.engine = create_engine_for(settings)
    app.state.session_factory = create_session_factory(app.state.engine)

    # Full paths: /todos, /todos/{id}, /users, /users/token
    app.include_router(todos_router)
    app.include_router(users_router)

    @app.get(
        "/health",
        tags=["Health"],
        summary="Health check",
    )
    async def health_check():
        """Check if the API service is running."""
        return {
            "status": "healthy",
            "service": "todo_api",
        }

    return app

