"""App catalog models."""

import json
import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.models.category import Category
from app.models.user import User

DEFAULT_ARCHITECTURE = "Native"


def utcnow() -> datetime:
    """Naive UTC timestamp (SQLite stores no timezone)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: datetime) -> datetime:
    """Shift an aware datetime to UTC and drop tzinfo; naive values pass through."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class App(Base):
    """Catalog app model."""

    __tablename__ = "apps"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    title: Mapped[str] = mapped_column(String(255), index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    platform: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)
    architecture: Mapped[str] = mapped_column(String(50), default=DEFAULT_ARCHITECTURE)

    # Pricing
    is_paid: Mapped[bool] = mapped_column(Boolean, default=False)
    price: Mapped[float | None] = mapped_column(Float, nullable=True)
    download_link: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    # Media
    size: Mapped[str | None] = mapped_column(String(50), nullable=True)
    cover_img: Mapped[str] = mapped_column(String(1024), default="")
    thumbnails: Mapped[str | None] = mapped_column(Text, nullable=True)  # JSON array

    category_id: Mapped[int] = mapped_column(ForeignKey("categories.id"), index=True)

    # Free-form JSON object
    system_requirements: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Popularity counters (only ever incremented in SQL)
    daily_views: Mapped[int] = mapped_column(Integer, default=0)
    weekly_views: Mapped[int] = mapped_column(Integer, default=0)
    monthly_views: Mapped[int] = mapped_column(Integer, default=0)
    total_downloads: Mapped[int] = mapped_column(Integer, default=0)
    last_viewed: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    # Sort metrics
    release_date: Mapped[datetime | None] = mapped_column(DateTime, default=utcnow)
    size_value: Mapped[int] = mapped_column(Integer, default=0)  # megabytes
    relevance_score: Mapped[float] = mapped_column(Float, default=0.0)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    category: Mapped[Category] = relationship(lazy="selectin")
    tag_rows: Mapped[list["AppTag"]] = relationship(
        back_populates="app",
        cascade="all, delete-orphan",
        order_by="AppTag.position",
        lazy="selectin",
    )
    reviews: Mapped[list["Review"]] = relationship(
        back_populates="app",
        cascade="all, delete-orphan",
        order_by="Review.id",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_apps_weekly_views", "weekly_views"),
        Index("ix_apps_release_date", "release_date"),
        Index("ix_apps_size_value", "size_value"),
    )

    @property
    def tags(self) -> list[str]:
        return [row.tag for row in self.tag_rows]

    def set_tags(self, tags: list[str]) -> None:
        """Replace tags, keeping the given order."""
        self.tag_rows = [AppTag(tag=tag, position=i) for i, tag in enumerate(tags)]

    def get_thumbnails(self) -> list[str]:
        """Deserialize thumbnail URLs JSON to list."""
        if not self.thumbnails:
            return []
        try:
            return json.loads(self.thumbnails)
        except json.JSONDecodeError:
            return []

    def set_thumbnails(self, urls: list[str]) -> None:
        """Serialize thumbnail URLs to JSON."""
        self.thumbnails = json.dumps(urls) if urls else None

    def get_system_requirements(self) -> Any:
        """Deserialize system requirements JSON."""
        if not self.system_requirements:
            return {}
        try:
            return json.loads(self.system_requirements)
        except json.JSONDecodeError:
            return {}

    def set_system_requirements(self, requirements: Any) -> None:
        """Serialize system requirements to JSON."""
        self.system_requirements = json.dumps(requirements)

    def __repr__(self) -> str:
        return f"<App {self.id}: {self.title}>"


class AppTag(Base):
    """Tag attached to an app; position keeps the submitted order."""

    __tablename__ = "app_tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    app_id: Mapped[str] = mapped_column(
        ForeignKey("apps.id", ondelete="CASCADE"), index=True
    )
    tag: Mapped[str] = mapped_column(String(100), index=True)
    position: Mapped[int] = mapped_column(Integer, default=0)

    app: Mapped[App] = relationship(back_populates="tag_rows")


class Review(Base):
    """User rating of an app."""

    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    app_id: Mapped[str] = mapped_column(
        ForeignKey("apps.id", ondelete="CASCADE"), index=True
    )
    user_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    rating: Mapped[int] = mapped_column(Integer)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    app: Mapped[App] = relationship(back_populates="reviews")
    user: Mapped[User | None] = relationship(lazy="selectin")

    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
    )
