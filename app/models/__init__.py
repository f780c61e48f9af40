"""Database models."""

from app.models.app import App, AppTag, Review
from app.models.category import Category
from app.models.user import Purchase, User

__all__ = [
    "App",
    "AppTag",
    "Category",
    "Purchase",
    "Review",
    "User",
]
