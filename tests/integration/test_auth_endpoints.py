"""Integration tests for auth endpoints."""
import pytest


@pytest.mark.asyncio
class TestAuthRegister:
    """Tests for POST /auth/register endpoint."""

    async def test_register_success(self, app_client):
        """Successful registration returns the new user without secrets."""
        response = await app_client.post(
            "/auth/register",
            json={
                "email": "newuser@example.com",
                "password": "securepassword123",
                "name": "New User",
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["email"] == "newuser@example.com"
        assert data["name"] == "New User"
        assert data["role"] == "user"
        assert data["status"] == "active"
        assert isinstance(data["id"], int)
        assert "password" not in data
        assert "hashed_password" not in data

    async def test_register_assigns_sequential_ids(self, app_client):
        """Each registration takes the next integer id."""
        first = await app_client.post(
            "/auth/register",
            json={"email": "one@example.com", "password": "pw", "name": "One"},
        )
        second = await app_client.post(
            "/auth/register",
            json={"email": "two@example.com", "password": "pw", "name": "Two"},
        )

        assert second.json()["id"] == first.json()["id"] + 1

    async def test_register_duplicate_email(self, app_client):
        """Registration with duplicate email returns 400."""
        payload = {"email": "duplicate@example.com", "password": "pw", "name": "First"}
        await app_client.post("/auth/register", json=payload)

        response = await app_client.post("/auth/register", json=payload)

        assert response.status_code == 400
        assert "already registered" in response.json()["detail"].lower()

    async def test_register_invalid_email(self, app_client):
        """Registration with invalid email returns 422."""
        response = await app_client.post(
            "/auth/register",
            json={"email": "not-an-email", "password": "pw", "name": "Test User"},
        )

        assert response.status_code == 422


@pytest.mark.asyncio
class TestAuthLogin:
    """Tests for POST /auth/login endpoint."""

    async def test_login_success(self, app_client):
        """Valid credentials return a bearer token."""
        await app_client.post(
            "/auth/register",
            json={"email": "login@example.com", "password": "password123", "name": "L"},
        )

        response = await app_client.post(
            "/auth/login",
            json={"email": "login@example.com", "password": "password123"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert len(data["access_token"]) > 0

    async def test_login_wrong_password(self, app_client):
        """Wrong password returns 401."""
        await app_client.post(
            "/auth/register",
            json={"email": "wrong@example.com", "password": "password123", "name": "W"},
        )

        response = await app_client.post(
            "/auth/login",
            json={"email": "wrong@example.com", "password": "nope"},
        )

        assert response.status_code == 401

    async def test_login_inactive_user(self, app_client, admin, user):
        """Deactivated users cannot log in."""
        await app_client.put(
            f"/users/{user['id']}/status",
            json={"status": "inactive"},
            headers=admin["headers"],
        )

        response = await app_client.post(
            "/auth/login",
            json={"email": "worker@example.com", "password": "password123"},
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Account is inactive"


@pytest.mark.asyncio
class TestAuthMe:
    """Tests for GET /auth/me endpoint."""

    async def test_get_current_user_authenticated(self, app_client, user):
        """The token resolves to the registered user."""
        response = await app_client.get("/auth/me", headers=user["headers"])

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == user["id"]
        assert data["email"] == "worker@example.com"

    async def test_get_current_user_no_token(self, app_client):
        """Missing token returns 401."""
        response = await app_client.get("/auth/me")

        assert response.status_code == 401

    async def test_get_current_user_invalid_token(self, app_client):
        """Invalid token returns 401."""
        response = await app_client.get(
            "/auth/me",
            headers={"Authorization": "Bearer invalid.token.here"},
        )

        assert response.status_code == 401

    async def test_deactivated_token_forbidden(self, app_client, admin, user):
        """Existing tokens stop working once the account is deactivated."""
        await app_client.put(
            f"/users/{user['id']}/status",
            json={"status": "inactive"},
            headers=admin["headers"],
        )

        response = await app_client.get("/auth/me", headers=user["headers"])

        assert response.status_code == 403
