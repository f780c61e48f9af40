"""Service layer for business logic."""

from app.services.app_service import AppService
from app.services.auth_service import AuthService
from app.services.category_service import CategoryService
from app.services.media_service import MediaService
from app.services.user_service import UserService

__all__ = [
    "AppService",
    "AuthService",
    "CategoryService",
    "MediaService",
    "UserService",
]
