"""Category and category rule repositories."""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from txnagg.models.category import Category, CategoryRule
from txnagg.repositories.base import BaseRepository


class CategoryRepository(BaseRepository[Category]):
    """Repository for Category model."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Category)

    async def list_categories(self, *, include_deleted: bool) -> list[Category]:
        """Get categories ordered by name."""
        stmt = self._scoped(select(Category), include_deleted).order_by(Category.name)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_by_name(self, name: str, *, include_deleted: bool) -> Category | None:
        stmt = self._scoped(select(Category).where(Category.name == name), include_deleted)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()


class CategoryRuleRepository(BaseRepository[CategoryRule]):
    """Repository for CategoryRule model."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, CategoryRule)

    async def list_active_rules(self, *, include_deleted: bool) -> list[CategoryRule]:
        """Get rules in evaluation order: priority descending, then creation order."""
        stmt = self._scoped(
            select(CategoryRule).where(CategoryRule.keyword != ""),
            include_deleted,
        ).order_by(
            CategoryRule.priority.desc(),
            CategoryRule.created_at.asc(),
            CategoryRule.id.asc(),
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
