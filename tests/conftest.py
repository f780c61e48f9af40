"""Pytest configuration and fixtures."""

import hashlib
from datetime import timedelta
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.deps import get_db, get_media_service
from app.core.security import create_access_token
from app.db.base import Base
from app.db import models_registry  # noqa: F401 - Import to register models
from app.main import app
from app.models.app import App, Review, utcnow
from app.models.category import Category
from app.models.user import ROLE_ADMIN, ROLE_USER, Purchase, User

# Test database URL (in-memory SQLite)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def _plain_hash(password: str) -> str:
    """Cheap password hash understood by verify_password (skips bcrypt)."""
    return "$plain$" + hashlib.sha256(password.encode()).hexdigest()


class FakeMediaService:
    """Media upload stand-in recording uploaded paths."""

    def __init__(self, fail_names: tuple[str, ...] = ()):
        self.fail_names = fail_names
        self.uploaded: list[Path] = []

    async def upload(self, path: Path) -> str | None:
        assert path.exists(), "upload called with a path that is not staged"
        self.uploaded.append(path)
        if any(name in path.name for name in self.fail_names):
            return None
        return f"https://cdn.test/{path.name}"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async_session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with async_session_maker() as session:
        yield session


@pytest.fixture
def media_service() -> FakeMediaService:
    """Fake media uploader."""
    return FakeMediaService()


@pytest.fixture
def upload_dir(tmp_path, monkeypatch) -> Path:
    """Point upload staging at a temporary directory."""
    from app.services import media_service as media_module

    staging = tmp_path / "uploads"
    monkeypatch.setattr(media_module.settings, "upload_dir", str(staging))
    return staging


@pytest_asyncio.fixture(scope="function")
async def client(
    db_session: AsyncSession,
    media_service: FakeMediaService,
    upload_dir: Path,
) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client with overridden dependencies."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_media_service] = lambda: media_service

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_user(db_session: AsyncSession) -> User:
    """Create regular user."""
    user = User(
        id="test-user",
        username="testuser",
        hashed_password=_plain_hash("testpassword"),
        avatar="https://cdn.test/avatars/testuser.png",
        role=ROLE_USER,
        is_active=True,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture(scope="function")
async def admin_user(db_session: AsyncSession) -> User:
    """Create admin user."""
    user = User(
        id="admin",
        username="admin",
        hashed_password=_plain_hash("admin"),
        role=ROLE_ADMIN,
        is_active=True,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    """Create authorization headers."""
    token = create_access_token(
        data={"sub": test_user.id, "username": test_user.username}
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_auth_headers(admin_user: User) -> dict:
    """Create admin authorization headers."""
    token = create_access_token(
        data={"sub": admin_user.id, "username": admin_user.username}
    )
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture(scope="function")
async def sample_categories(db_session: AsyncSession) -> list[Category]:
    """Create sample categories."""
    categories = [Category(name="Action"), Category(name="Puzzle"), Category(name="Empty")]
    for category in categories:
        db_session.add(category)
    await db_session.commit()
    return categories


@pytest_asyncio.fixture(scope="function")
async def sample_apps(
    db_session: AsyncSession,
    sample_categories: list[Category],
    test_user: User,
) -> list[App]:
    """Create sample apps.

    Two Action apps (one paid), one paid Puzzle app and one free Puzzle app.
    """
    now = utcnow()
    action, puzzle, _ = sample_categories

    rows = [
        # id, title, category, platform, paid, weekly, downloads, size_value, age_days, tags
        ("app-001", "Star Raiders", action, "Windows", True, 900, 400, 12 * 1024, 10, ["space", "shooter"]),
        ("app-002", "Dune Racer", action, "Windows", False, 300, 50, 160 * 1024, 200, ["racing"]),
        ("app-003", "Block Logic", puzzle, "Android", True, 50, 10, 7 * 1024, 400, ["casual", "logic"]),
        ("app-004", "Star Puzzle", puzzle, "Linux", False, 1200, 600, 512, 30, ["casual", "space"]),
    ]

    apps = []
    for index, (
        app_id, title, category, platform, paid, weekly, downloads, size_value, age, tags,
    ) in enumerate(rows):
        app = App(
            id=app_id,
            title=title,
            description=f"{title} description",
            platform=platform,
            is_paid=paid,
            price=9.99 if paid else None,
            download_link=f"https://downloads.test/{app_id}.zip",
            size=f"{size_value} MB",
            cover_img=f"https://cdn.test/{app_id}-cover.jpg",
            category=category,
            weekly_views=weekly,
            total_downloads=downloads,
            size_value=size_value,
            release_date=now - timedelta(days=age),
            created_at=now - timedelta(minutes=len(rows) - index),
            reviews=[],
        )
        app.set_tags(tags)
        app.set_thumbnails([f"https://cdn.test/{app_id}-1.jpg"])
        app.set_system_requirements({"os": platform})
        apps.append(app)
        db_session.add(app)

    apps[0].reviews.append(Review(user_id=test_user.id, rating=5, comment="Great"))
    apps[0].reviews.append(Review(user_id=test_user.id, rating=4))

    await db_session.commit()
    db_session.expunge_all()
    return apps


@pytest_asyncio.fixture(scope="function")
async def purchase(db_session: AsyncSession, test_user: User, sample_apps: list[App]) -> Purchase:
    """Give the test user the first (paid) sample app."""
    record = Purchase(user_id=test_user.id, app_id=sample_apps[0].id)
    db_session.add(record)
    await db_session.commit()
    return record
