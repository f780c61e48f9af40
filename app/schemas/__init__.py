"""Pydantic schemas for API request/response validation."""

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
from app.schemas.auth import Token, UserLogin

__all__ = [
    # App
    "AppCreate",
    "AppDTO",
    "AppQueryParams",
    "AppUpdate",
    "CategoryDTO",
    "Popularity",
    "ReviewAuthor",
    "ReviewDTO",
    "SortMetrics",
    # Auth
    "Token",
    "UserLogin",
]
