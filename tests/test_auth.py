"""Tests for authentication endpoints."""

import pytest
from httpx import AsyncClient

from app.core.security import decode_access_token
from app.models.user import User


@pytest.mark.asyncio
async def test_login_success(client: AsyncClient, admin_user: User):
    """Test successful login."""
    response = await client.post(
        "/api/v2/auth",
        json={"id": "admin", "password": "admin"},
    )

    assert response.status_code == 200
    data = response.json()
    assert "token" in data
    assert len(data["token"]) > 0

    payload = decode_access_token(data["token"])
    assert payload["sub"] == "admin"
    assert payload["role"] == "ADMIN"


@pytest.mark.asyncio
async def test_login_invalid_password(client: AsyncClient, admin_user: User):
    """Test login with wrong password."""
    response = await client.post(
        "/api/v2/auth",
        json={"id": "admin", "password": "wrongpassword"},
    )

    assert response.status_code == 401
    data = response.json()
    assert data["success"] is False
    assert data["message"] == "Incorrect username or password"


@pytest.mark.asyncio
async def test_login_nonexistent_user(client: AsyncClient):
    """Test login with non-existent user."""
    response = await client.post(
        "/api/v2/auth",
        json={"id": "nonexistent", "password": "password"},
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_missing_fields(client: AsyncClient):
    """Test login with missing fields."""
    response = await client.post(
        "/api/v2/auth",
        json={"id": "admin"},
    )

    assert response.status_code == 422  # Validation error
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_invalid_token_is_anonymous(client: AsyncClient, sample_apps):
    """A garbage bearer token does not authenticate."""
    response = await client.get(
        "/api/v2/apps/app-001/access",
        headers={"Authorization": "Bearer not-a-token"},
    )

    assert response.status_code == 401
