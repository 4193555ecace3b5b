"""Integration tests for user administration endpoints."""
import pytest


@pytest.mark.asyncio
class TestUserAdministration:
    """Tests for /users."""

    async def test_list_users_admin_only(self, app_client, admin, user):
        """Regular users are refused; admins see everyone."""
        forbidden = await app_client.get("/users", headers=user["headers"])
        assert forbidden.status_code == 403

        response = await app_client.get("/users", headers=admin["headers"])
        assert response.status_code == 200
        emails = {u["email"] for u in response.json()}
        assert emails == {"admin@example.com", "worker@example.com"}

    async def test_promote_user(self, app_client, admin, user):
        """Promoted users gain admin access."""
        response = await app_client.put(
            f"/users/{user['id']}/role",
            json={"role": "admin"},
            headers=admin["headers"],
        )

        assert response.status_code == 200
        assert response.json()["role"] == "admin"

        listing = await app_client.get("/users", headers=user["headers"])
        assert listing.status_code == 200

    async def test_set_role_unknown_user(self, app_client, admin):
        """Unknown users return 404."""
        response = await app_client.put(
            "/users/999/role",
            json={"role": "admin"},
            headers=admin["headers"],
        )

        assert response.status_code == 404

    async def test_invalid_role_rejected(self, app_client, admin, user):
        """Only known roles are accepted."""
        response = await app_client.put(
            f"/users/{user['id']}/role",
            json={"role": "owner"},
            headers=admin["headers"],
        )

        assert response.status_code == 422

    async def test_admin_cannot_deactivate_self(self, app_client, admin):
        """Admins keep their own access."""
        response = await app_client.put(
            f"/users/{admin['id']}/status",
            json={"status": "inactive"},
            headers=admin["headers"],
        )

        assert response.status_code == 400
