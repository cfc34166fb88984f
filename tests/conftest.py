"""
Pytest configuration and fixtures.

Fixtures are reusable test setup/teardown functions.
They're automatically discovered by pytest from this file.
"""

import pytest
import pytest_asyncio

from todo_api.models import User
from todo_api.testing import TodoApplication


# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================
# This tells pytest to use asyncio for async tests

pytest_plugins = ["pytest_asyncio"]


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep bearer settings from the developer's environment out of the tests."""
    for name in (
        "AUTHENTICATION",
        "AUTHENTICATION__SCHEMES__BEARER__SIGNING_KEYS",
        "AUTHENTICATION__SCHEMES__BEARER__VALID_AUDIENCES",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest_asyncio.fixture
async def application():
    """
    Provide a running test host.

    The in-memory database is created fresh for each test and dropped
    when the host is closed.
    """
    async with TodoApplication() as app:
        yield app


@pytest.fixture
def add_user(application):
    """
    Provide a helper that inserts a password-less user into the database.

    Usage:
        await add_user("34", "todouser")
    """

    async def _add_user(user_id: str, username: str) -> User:
        async with application.create_todo_db() as db:
            user = User(id=user_id, username=username)
            db.add(user)
            await db.commit()
            return user

    return _add_user
