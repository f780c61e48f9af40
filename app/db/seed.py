"""Database seeder for mock catalog data."""

import asyncio
import random
from datetime import timedelta
from pathlib import Path

from loguru import logger
from sqlalchemy import select

from app.core.config import get_settings
from app.core.security import get_password_hash
from app.db.base import Base
from app.db import models_registry  # noqa: F401 - Import to register models
from app.db.session import async_session_maker, engine
from app.models.app import App, Review, utcnow
from app.models.category import Category
from app.models.user import ROLE_ADMIN, ROLE_USER, Purchase, User
from app.services.app_service import parse_size_value
from app.services.ranking import relevance_score

CATEGORIES = ["Action", "Adventure", "Racing", "Strategy", "Simulation"]

SAMPLE_APPS = [
    # title, category, platform, size, paid, price, tags
    ("Iron Circuit", "Racing", "Windows", "42.5 GB", True, 29.99, ["racing", "multiplayer"]),
    ("Lantern Keep", "Adventure", "Windows", "8 GB", False, None, ["indie", "puzzle"]),
    ("Siegeworks", "Strategy", "Windows", "15.2 GB", True, 19.99, ["rts", "multiplayer"]),
    ("Skyhaul", "Simulation", "Linux", "3.4 GB", False, None, ["flight", "sandbox"]),
    ("Blade of Dusk", "Action", "Windows", "160 GB", True, 59.99, ["rpg", "open-world"]),
    ("Pocket Farm", "Simulation", "Android", "850 MB", False, None, ["casual"]),
]


async def create_tables():
    """Create all tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Tables created")


async def seed_users():
    """Seed users."""
    users = [
        User(
            id="admin",
            username="admin",
            hashed_password=get_password_hash("admin"),
            role=ROLE_ADMIN,
            is_active=True,
        ),
        User(
            id="player1",
            username="player",
            hashed_password=get_password_hash("player123"),
            avatar="https://example.com/avatars/player.png",
            role=ROLE_USER,
            is_active=True,
        ),
    ]

    async with async_session_maker() as db:
        for user in users:
            existing = await db.get(User, user.id)
            if not existing:
                db.add(user)
                logger.info(f"User '{user.username}' created")
        await db.commit()


async def seed_categories() -> dict[str, int]:
    """Seed categories and return name -> id."""
    async with async_session_maker() as db:
        for name in CATEGORIES:
            result = await db.execute(select(Category).where(Category.name == name))
            if not result.scalar_one_or_none():
                db.add(Category(name=name))
        await db.commit()

        result = await db.execute(select(Category))
        return {c.name: c.id for c in result.scalars().all()}


async def seed_apps(category_ids: dict[str, int]):
    """Seed apps with reviews and a purchase for the sample player."""
    now = utcnow()

    async with async_session_maker() as db:
        result = await db.execute(select(App.title))
        existing_titles = set(result.scalars().all())

        for title, category, platform, size, paid, price, tags in SAMPLE_APPS:
            if title in existing_titles:
                continue

            app = App(
                title=title,
                description=f"{title} - sample catalog entry",
                platform=platform,
                is_paid=paid,
                price=price,
                download_link=f"https://downloads.example.com/{title.lower().replace(' ', '-')}.zip",
                size=size,
                cover_img=f"https://cdn.example.com/covers/{title.lower().replace(' ', '-')}.jpg",
                category_id=category_ids[category],
                size_value=parse_size_value(size),
                release_date=now - timedelta(days=random.randint(0, 500)),
                weekly_views=random.randint(0, 1500),
                daily_views=random.randint(0, 200),
                monthly_views=random.randint(0, 5000),
                total_downloads=random.randint(0, 800),
                reviews=[
                    Review(user_id="player1", rating=random.randint(1, 5)),
                ],
            )
            app.set_tags(tags)
            app.set_thumbnails([
                f"https://cdn.example.com/thumbs/{title.lower().replace(' ', '-')}-{i}.jpg"
                for i in range(1, 3)
            ])
            app.set_system_requirements({"os": platform, "ram": "8 GB"})
            app.relevance_score = relevance_score(app, now)
            db.add(app)
            await db.flush()

            if paid and title == "Iron Circuit":
                db.add(Purchase(user_id="player1", app_id=app.id))

            logger.info(f"App '{title}' created")

        await db.commit()


async def main():
    """Run all seeders."""
    logger.info("Starting database seeding...")

    Path(get_settings().data_save_folder).mkdir(parents=True, exist_ok=True)
    await create_tables()
    await seed_users()
    category_ids = await seed_categories()
    await seed_apps(category_ids)

    logger.info("Database seeding completed!")


if __name__ == "__main__":
    asyncio.run(main())
