"""Relevance scoring and ranking strategies for catalog listings."""

from datetime import datetime, timezone
from typing import Any, Protocol, Sequence

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.app import App, as_naive_utc

RELEVANCE_WEIGHTS = {
    "rating": 0.4,
    "weekly_views": 0.3,
    "downloads": 0.2,
    "recency": 0.1,
}

NEUTRAL_RATING = 3.0
VIEWS_CAP = 1000
DOWNLOADS_CAP = 500
RECENCY_HORIZON_DAYS = 365
SECONDS_PER_DAY = 60 * 60 * 24


def average_rating(reviews: Sequence[Any]) -> float:
    """Mean review rating, or the neutral 3.0 when there are no reviews."""
    if not reviews:
        return NEUTRAL_RATING
    return sum(r.rating for r in reviews) / len(reviews)


def relevance_score(app: Any, now: datetime | None = None) -> float:
    """Weighted popularity/recency score in roughly the 0-1 range.

    ``app`` needs ``reviews`` (items with ``rating``), ``weekly_views``,
    ``total_downloads`` and ``release_date``. Recency is floored at zero but
    not capped, so future release dates score above 1 on that factor.
    """
    now = as_naive_utc(now or datetime.now(timezone.utc))

    normalized_rating = average_rating(app.reviews) / 5
    normalized_views = min((app.weekly_views or 0) / VIEWS_CAP, 1)
    normalized_downloads = min((app.total_downloads or 0) / DOWNLOADS_CAP, 1)

    if app.release_date is None:
        normalized_recency = 0.0
    else:
        age = now - as_naive_utc(app.release_date)
        days_old = age.total_seconds() / SECONDS_PER_DAY
        normalized_recency = max(0.0, 1 - days_old / RECENCY_HORIZON_DAYS)

    return (
        RELEVANCE_WEIGHTS["rating"] * normalized_rating
        + RELEVANCE_WEIGHTS["weekly_views"] * normalized_views
        + RELEVANCE_WEIGHTS["downloads"] * normalized_downloads
        + RELEVANCE_WEIGHTS["recency"] * normalized_recency
    )


class RankingStrategy(Protocol):
    """Orders a filtered app query and returns one page plus the total."""

    async def rank(
        self,
        db: AsyncSession,
        query: Select,
        offset: int,
        limit: int,
    ) -> tuple[list[App], int]:
        ...


class RelevanceRanking:
    """Scores candidate apps in memory, then paginates.

    The score depends on wall-clock time, so it cannot be indexed; every
    candidate is loaded before slicing out the page. ``candidate_limit``
    bounds how many rows are loaded (0 loads every match).
    """

    def __init__(self, candidate_limit: int = 0, now: datetime | None = None):
        self.candidate_limit = candidate_limit
        self.now = now

    async def rank(
        self,
        db: AsyncSession,
        query: Select,
        offset: int,
        limit: int,
    ) -> tuple[list[App], int]:
        count_query = select(func.count()).select_from(query.subquery())
        total = (await db.execute(count_query)).scalar() or 0

        candidates_query = query.order_by(App.created_at.desc(), App.id)
        if self.candidate_limit > 0:
            candidates_query = candidates_query.limit(self.candidate_limit)

        result = await db.execute(candidates_query)
        candidates = list(result.scalars().all())

        now = self.now or datetime.now(timezone.utc)
        scored = sorted(
            candidates,
            key=lambda app: relevance_score(app, now),
            reverse=True,
        )
        return scored[offset:offset + limit], total


class ColumnRanking:
    """Orders by stored columns and paginates in the database."""

    def __init__(self, *order_by: Any):
        self.order_by = order_by

    async def rank(
        self,
        db: AsyncSession,
        query: Select,
        offset: int,
        limit: int,
    ) -> tuple[list[App], int]:
        count_query = select(func.count()).select_from(query.subquery())
        total = (await db.execute(count_query)).scalar() or 0

        page_query = query.order_by(*self.order_by, App.id).offset(offset).limit(limit)
        result = await db.execute(page_query)
        return list(result.scalars().all()), total


SORT_COLUMNS: dict[str, tuple[Any, ...]] = {
    "popular": (App.weekly_views.desc(),),
    "newest": (App.release_date.desc(),),
    "oldest": (App.release_date.asc(),),
    "sizeAsc": (App.size_value.asc(),),
    "sizeDesc": (App.size_value.desc(),),
}
DEFAULT_SORT = (App.created_at.desc(),)


def get_ranking(sort_by: str, candidate_limit: int = 0) -> RankingStrategy:
    """Pick the ranking strategy for a ``sortBy`` value.

    Unknown values fall back to newest-created first.
    """
    if sort_by == "relevance":
        return RelevanceRanking(candidate_limit=candidate_limit)
    return ColumnRanking(*SORT_COLUMNS.get(sort_by, DEFAULT_SORT))
