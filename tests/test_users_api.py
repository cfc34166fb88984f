"""
Tests for the user endpoints.

These tests verify:
1. Users can register, and usernames are unique
2. Registered users can exchange credentials for a token that the
   todo endpoints accept
3. Bad credentials are rejected without revealing which part was wrong
"""

import pytest
from jose import jwt


async def register(client, username="alice", password="securepassword123"):
    return await client.post("/users", json={"username": username, "password": password})


class TestRegister:
    """POST /users"""

    @pytest.mark.asyncio
    async def test_register(self, application):
        client = application.create_default_client()

        response = await register(client)

        assert response.status_code == 201
        body = response.json()
        assert body["username"] == "alice"
        assert body["id"]
        assert "password" not in body
        assert "password_hash" not in body

    @pytest.mark.asyncio
    async def test_register_duplicate_username(self, application):
        client = application.create_default_client()
        await register(client)

        response = await register(client)

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_register_short_password(self, application):
        client = application.create_default_client()

        response = await register(client, password="short")

        assert response.status_code == 422


class TestToken:
    """POST /users/token"""

    @pytest.mark.asyncio
    async def test_token_for_registered_user(self, application):
        client = application.create_default_client()
        user = (await register(client)).json()

        response = await client.post(
            "/users/token",
            json={"username": "alice", "password": "securepassword123"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"

        claims = jwt.get_unverified_claims(body["access_token"])
        assert claims["id"] == user["id"]
        assert claims["sub"] == "alice"
        assert "role" not in claims

    @pytest.mark.asyncio
    async def test_issued_token_works_on_todos(self, application):
        """The full flow: register, get a token, create a todo with it."""
        client = application.create_default_client()
        await register(client)
        token = (
            await client.post(
                "/users/token",
                json={"username": "alice", "password": "securepassword123"},
            )
        ).json()["access_token"]

        headers = {"Authorization": f"Bearer {token}"}
        created = await client.post("/todos", json={"title": "From login"}, headers=headers)
        listing = await client.get("/todos", headers=headers)

        assert created.status_code == 201
        assert [todo["title"] for todo in listing.json()] == ["From login"]

    @pytest.mark.asyncio
    async def test_wrong_password(self, application):
        client = application.create_default_client()
        await register(client)

        response = await client.post(
            "/users/token",
            json={"username": "alice", "password": "wrongpassword"},
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid username or password"

    @pytest.mark.asyncio
    async def test_unknown_user(self, application):
        client = application.create_default_client()

        response = await client.post(
            "/users/token",
            json={"username": "nobody", "password": "securepassword123"},
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid username or password"

    @pytest.mark.asyncio
    async def test_password_less_user_cannot_log_in(self, application, add_user):
        await add_user("34", "todouser")
        client = application.create_default_client()

        response = await client.post(
            "/users/token",
            json={"username": "todouser", "password": "anything-at-all"},
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_no_signing_key_configured(self, application):
        """Without a signing key the service can't issue tokens."""
        client = application.create_default_client()
        await register(client)
        application.settings.bearer.signing_keys = []

        response = await client.post(
            "/users/token",
            json={"username": "alice", "password": "securepassword123"},
        )

        assert response.status_code == 503
