"""Auth service issuing catalog access tokens."""

from typing import Any

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import create_access_token
from app.models.user import User
from app.schemas.auth import Token
from app.services.user_service import UserService


class AuthService:
    """Authentication service."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.user_service = UserService(db)

    @staticmethod
    def token_claims(user: User) -> dict[str, Any]:
        """Claims carried by a bearer token; ``sub`` is the user id."""
        return {
            "sub": user.id,
            "username": user.username,
            "role": user.role,
        }

    def issue_token(self, user: User) -> Token:
        return Token(token=create_access_token(data=self.token_claims(user)))

    async def login(self, username: str, password: str) -> Token | None:
        """Check credentials and return a token, or None when they fail."""
        user = await self.user_service.authenticate(username, password)
        if not user:
            logger.info(f"Failed login attempt for '{username}'")
            return None

        logger.debug(f"User '{user.username}' logged in as {user.role}")
        return self.issue_token(user)
