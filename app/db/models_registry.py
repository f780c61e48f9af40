"""
Model registry.

Import all models here to ensure they are registered with SQLAlchemy metadata
before ``Base.metadata.create_all`` runs.
"""

from app.db.base import Base
from app.models.app import App, AppTag, Review
from app.models.category import Category
from app.models.user import Purchase, User

__all__ = [
    "Base",
    "App",
    "AppTag",
    "Category",
    "Purchase",
    "Review",
    "User",
]
