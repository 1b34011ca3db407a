"""Transaction repository with filtering, paging and streaming reads."""
from datetime import datetime
from typing import AsyncIterator, Sequence
from uuid import UUID

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from txnagg.categorization.rules import OTHER
from txnagg.models.transaction import Transaction
from txnagg.repositories.base import BaseRepository

# Position in the (created_at, id) ordering used to resume candidate scans.
CandidateCursor = tuple[datetime, UUID]


class TransactionRepository(BaseRepository[Transaction]):
    """Repository for Transaction model with search and reconciliation queries."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Transaction)

    async def count_where(
        self, conditions: Sequence[ColumnElement[bool]], *, include_deleted: bool
    ) -> int:
        """Count transactions matching all conditions."""
        stmt = self._scoped(
            select(func.count()).select_from(Transaction).where(*conditions),
            include_deleted,
        )
        result = await self.db.execute(stmt)
        return int(result.scalar_one())

    async def find_page(
        self,
        conditions: Sequence[ColumnElement[bool]],
        *,
        include_deleted: bool,
        page_no: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Transaction], int]:
        """Get one page of matching transactions, newest first, plus the total count.

        The total is counted independently of the page slice.
        """
        total = await self.count_where(conditions, include_deleted=include_deleted)

        stmt = self._scoped(select(Transaction).where(*conditions), include_deleted)
        stmt = (
            stmt.order_by(Transaction.transaction_date.desc(), Transaction.id.desc())
            .offset((page_no - 1) * page_size)
            .limit(page_size)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total

    async def stream(
        self,
        conditions: Sequence[ColumnElement[bool]],
        *,
        include_deleted: bool,
        chunk_size: int = 1000,
    ) -> AsyncIterator[Transaction]:
        """Iterate over every matching transaction without loading them all at once."""
        stmt = self._scoped(select(Transaction).where(*conditions), include_deleted)
        stmt = stmt.order_by(Transaction.transaction_date, Transaction.id)
        result = await self.db.stream_scalars(stmt.execution_options(yield_per=chunk_size))
        async for txn in result:
            yield txn

    async def get_reconciliation_candidates(
        self,
        limit: int,
        *,
        include_deleted: bool,
        after: CandidateCursor | None = None,
    ) -> list[Transaction]:
        """Get up to ``limit`` transactions that are uncategorized or in ``Other``.

        Candidates are ordered by (created_at, id); ``after`` resumes the scan
        past a previous batch so a backlog larger than one batch is walked
        through instead of re-reading its head every cycle.
        """
        stmt = self._scoped(
            select(Transaction).where(
                or_(
                    Transaction.category.is_(None),
                    Transaction.category == "",
                    Transaction.category == OTHER,
                )
            ),
            include_deleted,
        )
        if after is not None:
            created_at, txn_id = after
            stmt = stmt.where(
                or_(
                    Transaction.created_at > created_at,
                    and_(Transaction.created_at == created_at, Transaction.id > txn_id),
                )
            )
        stmt = stmt.order_by(Transaction.created_at, Transaction.id).limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
