"""Base repository with generic CRUD operations.

Soft-deleted rows are only returned when the caller passes
``include_deleted=True``; the flag is required on every read so the choice is
visible at each call site.
"""
from typing import Generic, Iterable, Type, TypeVar
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from txnagg.models.base import BaseModel, utcnow

T = TypeVar("T", bound=BaseModel)


class BaseRepository(Generic[T]):
    """Generic repository providing CRUD operations for any model."""

    def __init__(self, db: AsyncSession, model: Type[T]):
        self.db = db
        self.model = model

    def _scoped(self, stmt: Select, include_deleted: bool) -> Select:
        if include_deleted:
            return stmt
        return stmt.where(self.model.is_deleted.is_(False))

    async def get_by_id(self, id: UUID, *, include_deleted: bool) -> T | None:
        """Get a single record by ID."""
        stmt = self._scoped(select(self.model).where(self.model.id == id), include_deleted)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_all(self, *, include_deleted: bool, skip: int = 0, limit: int = 100) -> list[T]:
        """Get multiple records with pagination."""
        stmt = self._scoped(select(self.model), include_deleted)
        result = await self.db.execute(stmt.offset(skip).limit(limit))
        return list(result.scalars().all())

    async def count(self, *, include_deleted: bool) -> int:
        stmt = self._scoped(select(func.count()).select_from(self.model), include_deleted)
        result = await self.db.execute(stmt)
        return int(result.scalar_one())

    async def create(self, obj: T) -> T:
        """Create a new record."""
        self.db.add(obj)
        await self.db.commit()
        await self.db.refresh(obj)
        return obj

    async def save_all(self, objs: Iterable[T]) -> int:
        """Insert or update a batch of records in a single commit.

        The session is rolled back if the commit fails, leaving every record in
        the batch unchanged in the store.
        """
        objs = list(objs)
        if not objs:
            return 0
        self.db.add_all(objs)
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        return len(objs)

    async def soft_delete(self, id: UUID) -> bool:
        """Mark a record deleted. Returns False when it does not exist."""
        obj = await self.get_by_id(id, include_deleted=False)
        if not obj:
            return False

        obj.is_deleted = True
        obj.updated_at = utcnow()
        await self.db.commit()
        return True
