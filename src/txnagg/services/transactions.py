"""Read-side transaction queries.

One method per read endpoint. Store failures are surfaced as
StoreUnavailableError with a descriptive message; interactive reads never
retry.
"""

import functools
import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from txnagg.core.exceptions import StoreUnavailableError, ValidationFailure
from txnagg.models.transaction import Transaction
from txnagg.repositories.category import CategoryRepository
from txnagg.repositories.transaction import TransactionRepository
from txnagg.schemas.search import TransactionSearch, as_utc
from txnagg.schemas.summary import (
    CategoriesResponse,
    CategorySummaryResponse,
    CustomerSummary,
    SourceSummaryResponse,
)
from txnagg.schemas.transaction import (
    PaginationMeta,
    TransactionListResult,
    TransactionResponse,
)
from txnagg.services.aggregation import (
    CategoryAggregator,
    CustomerSummaryAggregator,
    SourceAggregator,
    feed_async,
)
from txnagg.services.query_filter import build_transaction_filter

logger = logging.getLogger(__name__)


def surfaces_store_errors(action: str):
    """Convert store exceptions raised by the wrapped query into StoreUnavailableError."""

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except SQLAlchemyError as exc:
                logger.error(f"Store failure while {action}", extra={"error_type": type(exc).__name__})
                raise StoreUnavailableError(
                    details={"action": action},
                    message=f"Error {action}: {exc}",
                ) from exc

        return wrapper

    return decorator


class TransactionQueryService:
    """Answers read requests over non-deleted transactions."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.transaction_repo = TransactionRepository(db)
        self.category_repo = CategoryRepository(db)

    async def _page(self, conditions, page_no: int, page_size: int) -> TransactionListResult:
        transactions, total = await self.transaction_repo.find_page(
            conditions, include_deleted=False, page_no=page_no, page_size=page_size
        )
        return TransactionListResult(
            transactions=[TransactionResponse.model_validate(txn) for txn in transactions],
            pagination=PaginationMeta.build(page_no, page_size, total),
        )

    @surfaces_store_errors("retrieving transactions")
    async def list_transactions(self, page_no: int = 1, page_size: int = 20) -> TransactionListResult:
        return await self._page([], page_no, page_size)

    @surfaces_store_errors("retrieving customer transactions")
    async def by_customer(self, customer_id: str, page_no: int = 1, page_size: int = 20) -> TransactionListResult:
        return await self._page([Transaction.customer_id == customer_id], page_no, page_size)

    @surfaces_store_errors("retrieving transactions by category")
    async def by_category(self, category: str, page_no: int = 1, page_size: int = 20) -> TransactionListResult:
        return await self._page([Transaction.category == category], page_no, page_size)

    @surfaces_store_errors("retrieving transactions by source")
    async def by_source(self, source: str, page_no: int = 1, page_size: int = 20) -> TransactionListResult:
        return await self._page([Transaction.source == source], page_no, page_size)

    @surfaces_store_errors("retrieving transactions by date range")
    async def by_date_range(
        self, start_date: datetime, end_date: datetime, page_no: int = 1, page_size: int = 20
    ) -> TransactionListResult:
        """Transactions dated within [start_date, end_date], inclusive. Naive bounds are taken as UTC."""
        start_date, end_date = as_utc(start_date), as_utc(end_date)
        if start_date > end_date:
            raise ValidationFailure(
                "QUERY_002",
                details={"start_date": start_date.isoformat(), "end_date": end_date.isoformat()},
                message="start_date must not be after end_date",
            )
        conditions = [
            Transaction.transaction_date >= start_date,
            Transaction.transaction_date <= end_date,
        ]
        return await self._page(conditions, page_no, page_size)

    @surfaces_store_errors("searching transactions")
    async def find_transactions(self, search: TransactionSearch) -> TransactionListResult:
        """Multi-criteria search. The request is validated before the store is queried."""
        conditions = build_transaction_filter(search)
        return await self._page(conditions, search.page_no, search.page_size)

    @surfaces_store_errors("retrieving customer summary")
    async def customer_summary(self, customer_id: str) -> CustomerSummary:
        """Summary of a customer's transactions.

        Raises:
            NotFoundError: If the customer has no transactions
        """
        rows = self.transaction_repo.stream(
            [Transaction.customer_id == customer_id], include_deleted=False
        )
        aggregator = await feed_async(CustomerSummaryAggregator(customer_id), rows)
        return aggregator.result()

    @surfaces_store_errors("retrieving category summary")
    async def category_summary(self) -> CategorySummaryResponse:
        rows = self.transaction_repo.stream([], include_deleted=False)
        aggregator = await feed_async(CategoryAggregator(), rows)
        return aggregator.result()

    @surfaces_store_errors("retrieving source summary")
    async def source_summary(self) -> SourceSummaryResponse:
        rows = self.transaction_repo.stream([], include_deleted=False)
        aggregator = await feed_async(SourceAggregator(), rows)
        return aggregator.result()

    @surfaces_store_errors("retrieving categories")
    async def list_categories(self) -> CategoriesResponse:
        categories = await self.category_repo.list_categories(include_deleted=False)
        return CategoriesResponse(categories=[category.name for category in categories])
