"""App service for catalog queries, counters and admin mutations."""

import json
import re
from datetime import datetime
from typing import Any

from sqlalchemy import Select, and_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.models.app import DEFAULT_ARCHITECTURE, App, AppTag, Review, utcnow
from app.models.category import Category
from app.schemas.app import (
    AppCreate,
    AppDTO,
    AppQueryParams,
    AppUpdate,
    CategoryDTO,
    Popularity,
    ReviewAuthor,
    ReviewDTO,
    SortMetrics,
)
from app.services.base_service import BaseService
from app.services.ranking import get_ranking, relevance_score

settings = get_settings()

# Size buckets in megabytes, inclusive; None means no upper bound
SIZE_RANGES: dict[str, tuple[int, int | None]] = {
    "5-10": (5 * 1024, 10 * 1024),
    "10-20": (10 * 1024, 20 * 1024),
    "20-40": (20 * 1024, 40 * 1024),
    "50-80": (50 * 1024, 80 * 1024),
    "80-100": (80 * 1024, 100 * 1024),
    "100-150": (100 * 1024, 150 * 1024),
    "150+": (150 * 1024, None),
}

_SIZE_UNITS_MB = {
    "b": 1 / (1024 * 1024),
    "kb": 1 / 1024,
    "mb": 1,
    "gb": 1024,
    "tb": 1024 * 1024,
}
_SIZE_PATTERN = re.compile(r"^\s*([\d.]+)\s*([kmgt]?b)?\s*$", re.IGNORECASE)


def parse_tags(raw: str | None) -> list[str]:
    """Split a comma-separated tag string, dropping blanks and repeats."""
    if not raw:
        return []
    tags: list[str] = []
    for part in raw.split(","):
        tag = part.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def count_tags(raw: str | None) -> int:
    """Number of non-blank comma-separated parts, repeats included."""
    if not raw:
        return 0
    return sum(1 for part in raw.split(",") if part.strip())


def parse_size_value(size: str | None) -> int:
    """Convert a display size such as ``"1.5 GB"`` to whole megabytes.

    A bare number is taken as megabytes. Unparseable input gives 0.
    """
    if not size:
        return 0
    match = _SIZE_PATTERN.match(size)
    if not match:
        return 0
    try:
        amount = float(match.group(1))
    except ValueError:
        return 0
    unit = (match.group(2) or "mb").lower()
    return int(round(amount * _SIZE_UNITS_MB[unit]))


def parse_system_requirements(raw: str | None) -> Any:
    """Parse the JSON system requirements field. Raises ValueError."""
    if raw is None or not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid systemRequirements: {e.msg}") from e


class AppService(BaseService[App]):
    """App service for catalog operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, App)

    def _build_query(
        self,
        params: AppQueryParams,
        category_id: int | None = None,
    ) -> Select:
        """Translate listing filters into a select."""
        query = select(App)

        filters = []
        if category_id is not None:
            filters.append(App.category_id == category_id)
        if params.q:
            filters.append(App.title.icontains(params.q, autoescape=True))
        if params.platform:
            filters.append(App.platform == params.platform)
        if params.architecture:
            filters.append(App.architecture == params.architecture)
        for tag in params.tags:
            filters.append(App.tag_rows.any(AppTag.tag == tag))
        if params.size_range and params.size_range in SIZE_RANGES:
            low, high = SIZE_RANGES[params.size_range]
            filters.append(App.size_value >= low)
            if high is not None:
                filters.append(App.size_value <= high)

        if filters:
            query = query.where(and_(*filters))
        return query

    async def list_apps(
        self,
        params: AppQueryParams,
        category_id: int | None = None,
    ) -> tuple[list[AppDTO], int]:
        """Get one page of matching apps and the total match count."""
        query = self._build_query(params, category_id)
        ranking = get_ranking(params.sort_by, settings.relevance_candidate_limit)
        apps, total = await ranking.rank(self.db, query, params.offset, params.limit)
        return [self.to_dto(app) for app in apps], total

    async def get_app(self, app_id: str) -> App | None:
        """Get app with category, tags and reviews loaded."""
        return await self.get_by_id(app_id, fresh=True)

    async def record_view(self, app_id: str) -> None:
        """Bump daily/weekly/monthly views and stamp last_viewed."""
        await self.db.execute(
            update(App)
            .where(App.id == app_id)
            .values(
                daily_views=App.daily_views + 1,
                weekly_views=App.weekly_views + 1,
                monthly_views=App.monthly_views + 1,
                last_viewed=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()

    async def record_download(self, app_id: str) -> int | None:
        """Increment total downloads and return the new count."""
        result = await self.db.execute(
            update(App)
            .where(App.id == app_id)
            .values(total_downloads=App.total_downloads + 1)
            .returning(App.total_downloads)
            .execution_options(synchronize_session=False)
        )
        total = result.scalar_one_or_none()
        await self.db.commit()
        return total

    async def create_app(
        self,
        data: AppCreate,
        category: Category,
        thumbnails: list[str],
        cover_img: str | None = None,
    ) -> AppDTO:
        """Persist a new app."""
        app = App(
            title=data.title,
            description=data.description,
            platform=data.platform,
            architecture=data.architecture or DEFAULT_ARCHITECTURE,
            is_paid=data.is_paid,
            price=data.price,
            download_link=data.download_link,
            size=data.size,
            cover_img=cover_img or "",
            category_id=category.id,
            category=category,
            size_value=parse_size_value(data.size),
            release_date=data.release_date or utcnow(),
            reviews=[],
        )
        app.set_tags(data.tags)
        app.set_thumbnails(thumbnails)
        app.set_system_requirements(data.system_requirements)
        app.relevance_score = relevance_score(app)

        app = await self.create(app)
        app = await self.get_app(app.id)
        return self.to_dto(app)

    async def update_app(
        self,
        app: App,
        data: AppUpdate,
        category: Category | None = None,
        thumbnails: list[str] | None = None,
        cover_img: str | None = None,
    ) -> AppDTO:
        """Apply supplied fields to an existing app."""
        for field in (
            "title",
            "description",
            "platform",
            "architecture",
            "is_paid",
            "price",
            "download_link",
        ):
            value = getattr(data, field)
            if value is not None:
                setattr(app, field, value)

        if data.tags is not None:
            app.set_tags(data.tags)
        if data.size is not None:
            app.size = data.size
            app.size_value = parse_size_value(data.size)
        if data.system_requirements is not None:
            app.set_system_requirements(data.system_requirements)
        if data.release_date is not None:
            app.release_date = data.release_date
        if category is not None:
            app.category_id = category.id
            app.category = category
        if cover_img:
            app.cover_img = cover_img
        if thumbnails is not None:
            app.set_thumbnails(thumbnails)

        app.updated_at = utcnow()
        app.relevance_score = relevance_score(app)

        await self.update(app)
        app = await self.get_app(app.id)
        return self.to_dto(app)

    async def delete_app(self, app_id: str) -> bool:
        """Hard delete an app with its tags and reviews."""
        return await self.delete_by_id(app_id)

    async def refresh_relevance_scores(self, now: datetime | None = None) -> int:
        """Recompute the stored relevance snapshot for every app."""
        apps = await self.get_all()
        for app in apps:
            app.relevance_score = relevance_score(app, now)
        await self.db.commit()
        return len(apps)

    def to_dto(self, app: App, expand_reviews: bool = False) -> AppDTO:
        """Convert App model to DTO."""
        return AppDTO(
            id=app.id,
            title=app.title,
            description=app.description,
            platform=app.platform,
            architecture=app.architecture,
            tags=app.tags,
            is_paid=app.is_paid,
            price=app.price,
            download_link=app.download_link,
            size=app.size,
            cover_img=app.cover_img or "",
            thumbnail=app.get_thumbnails(),
            category=CategoryDTO.model_validate(app.category) if app.category else None,
            system_requirements=app.get_system_requirements(),
            reviews=[self._review_to_dto(r, expand_reviews) for r in app.reviews],
            popularity=Popularity(
                daily_views=app.daily_views or 0,
                weekly_views=app.weekly_views or 0,
                monthly_views=app.monthly_views or 0,
                total_downloads=app.total_downloads or 0,
                last_viewed=app.last_viewed,
            ),
            sort_metrics=SortMetrics(
                release_date=app.release_date,
                size_value=app.size_value or 0,
                relevance_score=app.relevance_score or 0.0,
            ),
            created_at=app.created_at,
            updated_at=app.updated_at,
        )

    def _review_to_dto(self, review: Review, expand: bool) -> ReviewDTO:
        author: ReviewAuthor | str | None = review.user_id
        if expand and review.user is not None:
            author = ReviewAuthor.model_validate(review.user)
        return ReviewDTO(
            id=review.id,
            user_id=author,
            rating=review.rating,
            comment=review.comment,
        )
