"""Tests for category endpoints."""

import pytest
from httpx import AsyncClient

from app.models.app import App
from app.models.category import Category


def _ids(response) -> list[str]:
    return [app["id"] for app in response.json()["apps"]]


@pytest.mark.asyncio
async def test_get_categories(client: AsyncClient, sample_categories: list[Category]):
    """Test listing categories sorted by name."""
    response = await client.get("/api/v2/categories")

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert [c["name"] for c in data["categories"]] == ["Action", "Empty", "Puzzle"]


@pytest.mark.asyncio
async def test_category_apps(client: AsyncClient, sample_apps: list[App]):
    """Test listing a category defaults to newest release first."""
    response = await client.get("/api/v2/categories/Action/apps")

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert _ids(response) == ["app-001", "app-002"]


@pytest.mark.asyncio
async def test_category_apps_unknown_category(client: AsyncClient, sample_apps: list[App]):
    """Test an unknown category name."""
    response = await client.get("/api/v2/categories/Nope/apps")

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Category not found"}


@pytest.mark.asyncio
async def test_category_apps_empty_category(client: AsyncClient, sample_apps: list[App]):
    """Test a category without apps is a 404."""
    response = await client.get("/api/v2/categories/Empty/apps")

    assert response.status_code == 404
    assert response.json()["message"] == "No apps found for this category"


@pytest.mark.asyncio
async def test_category_apps_size_range_open_ended(
    client: AsyncClient, sample_apps: list[App]
):
    """Test the 150+ bucket has no upper bound."""
    response = await client.get(
        "/api/v2/categories/Action/apps", params={"sizeRange": "150+"}
    )

    assert response.status_code == 200
    assert _ids(response) == ["app-002"]


@pytest.mark.asyncio
async def test_category_apps_size_range_bounded(client: AsyncClient, sample_apps: list[App]):
    """Test a bounded size bucket."""
    response = await client.get(
        "/api/v2/categories/Puzzle/apps", params={"sizeRange": "5-10"}
    )

    assert response.status_code == 200
    assert _ids(response) == ["app-003"]


@pytest.mark.asyncio
async def test_category_apps_size_range_no_match(client: AsyncClient, sample_apps: list[App]):
    """Test filters that leave nothing are a 404."""
    response = await client.get(
        "/api/v2/categories/Action/apps", params={"sizeRange": "50-80"}
    )

    assert response.status_code == 404
    assert response.json()["message"] == "No apps found for this category"


@pytest.mark.asyncio
async def test_category_apps_unknown_size_range_ignored(
    client: AsyncClient, sample_apps: list[App]
):
    """Test an unrecognised bucket does not filter."""
    response = await client.get(
        "/api/v2/categories/Action/apps", params={"sizeRange": "huge"}
    )

    assert response.status_code == 200
    assert response.json()["total"] == 2


@pytest.mark.asyncio
async def test_category_apps_sorting(client: AsyncClient, sample_apps: list[App]):
    """Test category listing honours sortBy."""
    response = await client.get(
        "/api/v2/categories/Puzzle/apps", params={"sortBy": "sizeDesc"}
    )
    assert _ids(response) == ["app-003", "app-004"]

    response = await client.get(
        "/api/v2/categories/Puzzle/apps", params={"sortBy": "relevance"}
    )
    assert _ids(response) == ["app-004", "app-003"]


@pytest.mark.asyncio
async def test_category_apps_relevance_redacts(
    client: AsyncClient, sample_apps: list[App]
):
    """Test relevance results are redacted like every other sort."""
    response = await client.get(
        "/api/v2/categories/Action/apps", params={"sortBy": "relevance"}
    )

    apps = {app["id"]: app for app in response.json()["apps"]}
    assert "downloadLink" not in apps["app-001"]
    assert apps["app-002"]["downloadLink"] == "https://downloads.test/app-002.zip"


@pytest.mark.asyncio
async def test_category_apps_filters(client: AsyncClient, sample_apps: list[App]):
    """Test platform and tag filters within a category."""
    response = await client.get(
        "/api/v2/categories/Puzzle/apps", params={"tags": "logic"}
    )
    assert _ids(response) == ["app-003"]

    response = await client.get(
        "/api/v2/categories/Puzzle/apps", params={"platform": "Linux"}
    )
    assert _ids(response) == ["app-004"]
