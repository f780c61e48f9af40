"""Category service for lazy category creation and lookup."""

from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.category import Category
from app.schemas.app import CategoryDTO
from app.services.base_service import BaseService


class CategoryService(BaseService[Category]):
    """Category service."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Category)

    async def get_by_name(self, name: str) -> Category | None:
        """Get category by its unique name."""
        result = await self.db.execute(
            select(Category).where(Category.name == name)
        )
        return result.scalar_one_or_none()

    async def get_or_create(self, name: str) -> Category:
        """Find a category by name, inserting it first if absent.

        Uses INSERT ... ON CONFLICT DO NOTHING against the unique name index,
        so concurrent callers converge on a single row. The insert is
        committed immediately and is not undone if the caller fails later.
        """
        await self.db.execute(
            insert(Category)
            .values(name=name)
            .on_conflict_do_nothing(index_elements=[Category.name])
        )
        await self.db.commit()

        result = await self.db.execute(
            select(Category).where(Category.name == name)
        )
        return result.scalar_one()

    async def get_all_dto(self) -> list[CategoryDTO]:
        """Get all categories ordered by name."""
        result = await self.db.execute(select(Category).order_by(Category.name))
        return [CategoryDTO.model_validate(c) for c in result.scalars().all()]
