"""Pytest configuration and fixtures."""
import os

os.environ.setdefault("MONGODB_URL", "mongodb://localhost:27017")
os.environ.setdefault("JWT_SECRET", "test-secret-key")

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from mongomock_motor import AsyncMongoMockClient

from app.main import app
from app.config import settings


@pytest_asyncio.fixture
async def test_db():
    """In-memory Motor-compatible database, fresh for every test."""
    client = AsyncMongoMockClient(tz_aware=True)
    return client[f"{settings.mongodb_db_name}_test"]


@pytest_asyncio.fixture
async def app_client(test_db):
    """
    Create a test client bound to the in-memory database.

    This fixture:
    - Swaps the application database for the test database
    - Yields an async HTTP client for testing
    - Restores the original database afterwards
    """
    from app.database import database
    original_db = database.db
    database.db = test_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client

    database.db = original_db


async def register_and_login(app_client, email: str, name: str = "Test User") -> dict:
    """Register a user and return its id and auth headers."""
    register_response = await app_client.post(
        "/auth/register",
        json={"email": email, "password": "password123", "name": name},
    )
    login_response = await app_client.post(
        "/auth/login",
        json={"email": email, "password": "password123"},
    )
    token = login_response.json()["access_token"]
    return {
        "id": register_response.json()["id"],
        "headers": {"Authorization": f"Bearer {token}"},
    }


@pytest_asyncio.fixture
async def admin(app_client, test_db):
    """An authenticated admin account."""
    account = await register_and_login(app_client, "admin@example.com", "Ada Admin")
    await test_db["users"].update_one({"_id": account["id"]}, {"$set": {"role": "admin"}})
    return account


@pytest_asyncio.fixture
async def user(app_client):
    """An authenticated regular account."""
    return await register_and_login(app_client, "worker@example.com", "Wally Worker")


@pytest_asyncio.fixture
async def catalog(app_client, admin):
    """A client, project and task created through the API."""
    client_response = await app_client.post(
        "/clients", json={"name": "Acme"}, headers=admin["headers"]
    )
    client_id = client_response.json()["id"]

    project_response = await app_client.post(
        "/projects",
        json={"client_id": client_id, "name": "Website"},
        headers=admin["headers"],
    )
    project_id = project_response.json()["id"]

    task_response = await app_client.post(
        "/tasks",
        json={"project_id": project_id, "name": "Build landing page"},
        headers=admin["headers"],
    )

    return {
        "client_id": client_id,
        "project_id": project_id,
        "task_id": task_response.json()["id"],
    }


@pytest_asyncio.fixture
async def register(app_client):
    """Factory registering further accounts: ``await register(email)``."""
    async def _register(email: str, name: str = "Test User") -> dict:
        return await register_and_login(app_client, email, name)
    return _register
