"""Aggregate view schemas: category, source and customer summaries."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class CategoryBreakdown(BaseModel):
    """Totals for one category."""

    name: str
    total_amount: Decimal
    count: int
    average_amount: Decimal


class CategorySummaryResponse(BaseModel):
    """Per-category breakdown over all transactions."""

    categories: dict[str, CategoryBreakdown] = Field(
        default_factory=dict, description="Breakdowns keyed by category name, in name order"
    )
    total_amount: Decimal = Decimal("0")
    total_transactions: int = 0


class SourceBreakdown(BaseModel):
    """Totals for one source system."""

    name: str
    count: int
    total_amount: Decimal
    percentage: Decimal = Field(description="Share of all transactions, 0-100")


class SourceSummaryResponse(BaseModel):
    """Per-source breakdown over all transactions."""

    sources: dict[str, SourceBreakdown] = Field(
        default_factory=dict, description="Breakdowns keyed by source name, in name order"
    )
    total_transactions: int = 0


class CustomerSummary(BaseModel):
    """Everything known about one customer's transactions."""

    customer_id: str
    customer_name: str
    total_amount: Decimal
    count: int
    average_amount: Decimal
    first_date: datetime
    last_date: datetime
    sources: list[str]
    category_totals: dict[str, Decimal]
    category_counts: dict[str, int]


class CategoriesResponse(BaseModel):
    """Names of all active categories."""

    categories: list[str]
