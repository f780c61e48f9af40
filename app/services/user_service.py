"""User service for user management."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import get_password_hash, verify_password
from app.models.user import ROLE_USER, Purchase, User
from app.services.base_service import BaseService


class UserService(BaseService[User]):
    """User service for authentication and ownership records."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, User)

    async def get_by_username(self, username: str) -> User | None:
        """Get user by username."""
        result = await self.db.execute(
            select(User).where(User.username == username)
        )
        return result.scalar_one_or_none()

    async def authenticate(self, username: str, password: str) -> User | None:
        """Authenticate user by username and password."""
        user = await self.get_by_username(username)
        if not user or not user.is_active:
            return None
        if not verify_password(password, user.hashed_password):
            return None
        return user

    async def create_user(
        self,
        user_id: str,
        username: str,
        password: str,
        role: str = ROLE_USER,
        avatar: str | None = None,
    ) -> User:
        """Create new user."""
        user = User(
            id=user_id,
            username=username,
            hashed_password=get_password_hash(password),
            avatar=avatar,
            role=role,
            is_active=True,
            purchases=[],
        )
        return await self.create(user)

    async def add_purchase(self, user_id: str, app_id: str) -> bool:
        """Record that a user owns an app. Idempotent."""
        user = await self.get_by_id(user_id)
        if not user:
            return False
        existing = await self.db.get(Purchase, (user_id, app_id))
        if not existing:
            self.db.add(Purchase(user_id=user_id, app_id=app_id))
            await self.db.commit()
            await self.get_by_id(user_id, fresh=True)
        return True
