"""App schemas for API request/response."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from app.models.app import as_naive_utc


class CategoryDTO(BaseModel):
    """Category response schema."""

    id: int
    name: str

    model_config = {"from_attributes": True}


class ReviewAuthor(BaseModel):
    """Expanded review author."""

    id: str
    username: str
    avatar: str | None = None

    model_config = {"from_attributes": True}


class ReviewDTO(BaseModel):
    """App review schema; userId is expanded on single-item reads."""

    id: int
    user_id: ReviewAuthor | str | None = Field(None, alias="userId")
    rating: int = Field(..., ge=1, le=5)
    comment: str | None = None

    model_config = {"populate_by_name": True}


class Popularity(BaseModel):
    """Popularity counters."""

    daily_views: int = Field(0, alias="dailyViews")
    weekly_views: int = Field(0, alias="weeklyViews")
    monthly_views: int = Field(0, alias="monthlyViews")
    total_downloads: int = Field(0, alias="totalDownloads")
    last_viewed: datetime | None = Field(None, alias="lastViewed")

    model_config = {"populate_by_name": True}


class SortMetrics(BaseModel):
    """Denormalized values used for sorting."""

    release_date: datetime | None = Field(None, alias="releaseDate")
    size_value: int = Field(0, alias="sizeValue")
    relevance_score: float = Field(0.0, alias="relevanceScore")

    model_config = {"populate_by_name": True}


class AppDTO(BaseModel):
    """App response schema."""

    id: str
    title: str
    description: str | None = None
    platform: str | None = None
    architecture: str = "Native"
    tags: list[str] = []
    is_paid: bool = Field(False, alias="isPaid")
    price: float | None = None
    download_link: str | None = Field(None, alias="downloadLink")
    size: str | None = None
    cover_img: str = Field("", alias="coverImg")
    thumbnail: list[str] = []
    category: CategoryDTO | None = None
    system_requirements: Any = Field(default_factory=dict, alias="systemRequirements")
    reviews: list[ReviewDTO] = []
    popularity: Popularity = Field(default_factory=Popularity)
    sort_metrics: SortMetrics = Field(default_factory=SortMetrics, alias="sortMetrics")
    created_at: datetime | None = Field(None, alias="createdAt")
    updated_at: datetime | None = Field(None, alias="updatedAt")

    model_config = {"populate_by_name": True}

    def to_response(self, redact: bool = True) -> dict[str, Any]:
        """Serialize for a response body.

        With ``redact`` set, paid apps lose the ``downloadLink`` key entirely.
        """
        exclude = {"download_link"} if redact and self.is_paid else None
        return self.model_dump(mode="json", by_alias=True, exclude=exclude)


class AppQueryParams(BaseModel):
    """Catalog listing query parameters."""

    page: int = Field(1, ge=1)
    limit: int = Field(48, ge=1)
    q: str | None = None
    platform: str | None = None
    architecture: str | None = None
    tags: list[str] = []
    size_range: str | None = Field(None, alias="sizeRange")
    sort_by: str = Field("popular", alias="sortBy")

    model_config = {"populate_by_name": True}

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class AppCreate(BaseModel):
    """Validated admin create payload (files handled separately)."""

    title: str
    description: str | None = None
    platform: str | None = None
    architecture: str | None = None
    tags: list[str] = []
    is_paid: bool = False
    price: float | None = None
    download_link: str | None = None
    size: str | None = None
    category: str
    system_requirements: Any = Field(default_factory=dict)
    release_date: datetime | None = None

    @field_validator("release_date")
    @classmethod
    def release_date_to_utc(cls, v: datetime | None) -> datetime | None:
        """Store release dates as naive UTC."""
        return as_naive_utc(v) if v is not None else None


class AppUpdate(BaseModel):
    """Partial admin update payload; None means unchanged."""

    title: str | None = None
    description: str | None = None
    platform: str | None = None
    architecture: str | None = None
    tags: list[str] | None = None
    is_paid: bool | None = None
    price: float | None = None
    download_link: str | None = None
    size: str | None = None
    category: str | None = None
    system_requirements: Any = None
    release_date: datetime | None = None

    @field_validator("release_date")
    @classmethod
    def release_date_to_utc(cls, v: datetime | None) -> datetime | None:
        return as_naive_utc(v) if v is not None else None
