"""Transaction query endpoints.

Read-only views over the transaction store. Pagination uses ``pageNo`` and
``pageSize`` query parameters.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from txnagg.api.deps import get_transaction_service
from txnagg.config import settings
from txnagg.schemas.search import TransactionSearch
from txnagg.schemas.summary import (
    CategoriesResponse,
    CategorySummaryResponse,
    CustomerSummary,
    SourceSummaryResponse,
)
from txnagg.schemas.transaction import TransactionListResult
from txnagg.services.transactions import TransactionQueryService

router = APIRouter(prefix="/transactions", tags=["transactions"])

PageNo = Annotated[int, Query(alias="pageNo", ge=1, description="Page number (1-indexed)")]
PageSize = Annotated[
    int,
    Query(
        alias="pageSize",
        ge=1,
        le=settings.page_size_max,
        description=f"Items per page (1-{settings.page_size_max})",
    ),
]


@router.get("", response_model=TransactionListResult, summary="List all transactions")
async def list_transactions(
    page_no: PageNo = 1,
    page_size: PageSize = 20,
    service: TransactionQueryService = Depends(get_transaction_service),
) -> TransactionListResult:
    return await service.list_transactions(page_no, page_size)


@router.get(
    "/find",
    response_model=TransactionListResult,
    summary="Search transactions",
    description="""
    Multi-criteria search. Every supplied field must match.

    - **customer_name**, **description**: case-insensitive substring
    - **min_amount**, **max_amount**, **start_date**, **end_date**: inclusive bounds
    - everything else: exact match

    At least one criterion is required; blank values count as not supplied.
    """,
)
async def find_transactions(
    id: Annotated[UUID | None, Query(description="Transaction ID")] = None,
    customer_id: Annotated[str | None, Query()] = None,
    customer_name: Annotated[str | None, Query()] = None,
    min_amount: Annotated[Decimal | None, Query()] = None,
    max_amount: Annotated[Decimal | None, Query()] = None,
    start_date: Annotated[datetime | None, Query(description="From date (inclusive)")] = None,
    end_date: Annotated[datetime | None, Query(description="To date (inclusive)")] = None,
    description: Annotated[str | None, Query()] = None,
    category: Annotated[str | None, Query()] = None,
    source: Annotated[str | None, Query()] = None,
    currency: Annotated[str | None, Query()] = None,
    type: Annotated[str | None, Query(description="Debit or Credit")] = None,
    page_no: PageNo = 1,
    page_size: PageSize = 20,
    service: TransactionQueryService = Depends(get_transaction_service),
) -> TransactionListResult:
    search = TransactionSearch(
        id=id,
        customer_id=customer_id,
        customer_name=customer_name,
        min_amount=min_amount,
        max_amount=max_amount,
        start_date=start_date,
        end_date=end_date,
        description=description,
        category=category,
        source=source,
        currency=currency,
        type=type,
        page_no=page_no,
        page_size=page_size,
    )
    return await service.find_transactions(search)


@router.get("/date-range", response_model=TransactionListResult, summary="Transactions within a date range")
async def transactions_by_date_range(
    start_date: Annotated[datetime, Query(description="From date (inclusive)")],
    end_date: Annotated[datetime, Query(description="To date (inclusive)")],
    page_no: PageNo = 1,
    page_size: PageSize = 20,
    service: TransactionQueryService = Depends(get_transaction_service),
) -> TransactionListResult:
    return await service.by_date_range(start_date, end_date, page_no, page_size)


@router.get("/customer/{customer_id}", response_model=TransactionListResult)
async def transactions_by_customer(
    customer_id: str,
    page_no: PageNo = 1,
    page_size: PageSize = 20,
    service: TransactionQueryService = Depends(get_transaction_service),
) -> TransactionListResult:
    return await service.by_customer(customer_id, page_no, page_size)


@router.get(
    "/customer/{customer_id}/summary",
    response_model=CustomerSummary,
    summary="Customer summary",
    responses={404: {"description": "Customer has no transactions"}},
)
async def customer_summary(
    customer_id: str,
    service: TransactionQueryService = Depends(get_transaction_service),
) -> CustomerSummary:
    return await service.customer_summary(customer_id)


@router.get("/category/{category}", response_model=TransactionListResult)
async def transactions_by_category(
    category: str,
    page_no: PageNo = 1,
    page_size: PageSize = 20,
    service: TransactionQueryService = Depends(get_transaction_service),
) -> TransactionListResult:
    return await service.by_category(category, page_no, page_size)


@router.get("/source/{source}", response_model=TransactionListResult)
async def transactions_by_source(
    source: str,
    page_no: PageNo = 1,
    page_size: PageSize = 20,
    service: TransactionQueryService = Depends(get_transaction_service),
) -> TransactionListResult:
    return await service.by_source(source, page_no, page_size)


@router.get("/summary/categories", response_model=CategorySummaryResponse, summary="Spending by category")
async def category_summary(
    service: TransactionQueryService = Depends(get_transaction_service),
) -> CategorySummaryResponse:
    return await service.category_summary()


@router.get("/summary/sources", response_model=SourceSummaryResponse, summary="Transactions by source")
async def source_summary(
    service: TransactionQueryService = Depends(get_transaction_service),
) -> SourceSummaryResponse:
    return await service.source_summary()


@router.get("/categories", response_model=CategoriesResponse, summary="Available categories")
async def list_categories(
    service: TransactionQueryService = Depends(get_transaction_service),
) -> CategoriesResponse:
    return await service.list_categories()
