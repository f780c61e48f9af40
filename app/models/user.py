"""User model for authentication and ownership."""

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base

ROLE_ADMIN = "ADMIN"
ROLE_USER = "USER"


class User(Base):
    """User database model."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    username: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255))
    avatar: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    role: Mapped[str] = mapped_column(String(32), default=ROLE_USER)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    purchases: Mapped[list["Purchase"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def purchased_games(self) -> set[str]:
        """Identifiers of apps owned by this user."""
        return {p.app_id for p in self.purchases}


class Purchase(Base):
    """Owned app record - composite key (user_id, app_id)."""

    __tablename__ = "purchases"

    user_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    # No FK: purchase records outlive deleted apps
    app_id: Mapped[str] = mapped_column(String(36), primary_key=True)

    user: Mapped[User] = relationship(back_populates="purchases")
