"""
Quillboard Backend: Auth API Tests
===================================

Registration, login and current-user resolution over HTTP.
"""

import pytest

TEST_PASSWORD = "secret123"


async def _register(client, **overrides):
    body = {"name": "Bea Blogger", "email": "bea@example.com", "password": "secret123"}
    body.update(overrides)
    return await client.post("/api/auth/register", json=body)


class TestRegister:

    @pytest.mark.asyncio
    async def test_register_returns_token_and_user(self, test_client):
        response = await _register(test_client, email="Bea@Example.com")

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["token"]
        assert data["tokenType"] == "bearer"
        assert data["user"]["email"] == "bea@example.com"
        assert data["user"]["role"] == "user"
        assert "passwordHash" not in data["user"]

    @pytest.mark.asyncio
    async def test_role_cannot_be_self_assigned(self, test_client):
        response = await _register(test_client, role="admin")
        assert response.json()["data"]["user"]["role"] == "user"

    @pytest.mark.asyncio
    async def test_duplicate_email(self, test_client):
        await _register(test_client)

        response = await _register(test_client, email="BEA@example.com")

        assert response.status_code == 400
        assert "already exists" in response.json()["message"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides, field",
        [
            ({"password": "12345"}, "password"),
            ({"email": "nope"}, "email"),
            ({"name": "   "}, "name"),
            ({"name": "n" * 51}, "name"),
        ],
    )
    async def test_invalid_input(self, test_client, overrides, field):
        response = await _register(test_client, **overrides)

        assert response.status_code == 400
        assert response.json()["details"]["field"] == field


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_and_me(self, test_client, author):
        login = await test_client.post(
            "/api/auth/login", json={"email": "ADA@example.com", "password": TEST_PASSWORD}
        )
        assert login.status_code == 200
        token = login.json()["data"]["token"]

        me = await test_client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert me.status_code == 200
        assert me.json()["data"]["id"] == str(author.id)
        assert me.json()["data"]["name"] == "Ada Author"

    @pytest.mark.asyncio
    async def test_wrong_password(self, test_client, author):
        response = await test_client.post(
            "/api/auth/login", json={"email": "ada@example.com", "password": "wrong-password"}
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_unknown_email_has_same_message(self, test_client):
        response = await test_client.post(
            "/api/auth/login", json={"email": "ghost@example.com", "password": "whatever"}
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_missing_fields(self, test_client):
        response = await test_client.post("/api/auth/login", json={"email": "ada@example.com"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_me_requires_token(self, test_client):
        response = await test_client.get("/api/auth/me")
        assert response.status_code == 401
