"""Transaction request/response schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PaginationMeta(BaseModel):
    """Pagination metadata for list responses."""

    page: int = Field(description="Current page number (1-indexed)")
    page_size: int = Field(description="Items per page")
    total_count: int = Field(description="Total matching transactions")
    total_pages: int = Field(description="Total number of pages")

    @classmethod
    def build(cls, page: int, page_size: int, total_count: int) -> "PaginationMeta":
        total_pages = (total_count + page_size - 1) // page_size if total_count > 0 else 0
        return cls(page=page, page_size=page_size, total_count=total_count, total_pages=total_pages)


class TransactionResponse(BaseModel):
    """Transaction data for API responses."""

    id: UUID
    customer_id: str
    customer_name: str
    amount: Decimal = Field(description="Signed amount; positive is a credit")
    transaction_date: datetime
    description: str
    category: str = Field(description="Category name; empty while uncategorized")
    source: str = Field(description="Originating system")
    currency: str
    type: str = Field(description="Debit or Credit")
    created_at: datetime
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class TransactionListResult(BaseModel):
    """A page of transactions."""

    transactions: list[TransactionResponse]
    pagination: PaginationMeta


class TransactionCreate(BaseModel):
    """An incoming transaction record from an upstream source."""

    customer_id: str = Field(min_length=1, max_length=64)
    customer_name: str = Field(default="", max_length=255)
    amount: Decimal = Field(max_digits=18, decimal_places=2)
    transaction_date: datetime
    description: str = Field(min_length=1)
    category: str = Field(default="", max_length=100, description="Pre-assigned category, if any")
    source: str = Field(min_length=1, max_length=100)
    currency: str | None = Field(default=None, description="ISO currency code; defaults to the configured currency")

    @field_validator("customer_id", "customer_name", "description", "category", "source")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()

    @field_validator("customer_id", "description", "source")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("currency")
    @classmethod
    def currency_code(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip().upper()
        if len(v) != 3 or not v.isalpha():
            raise ValueError("currency must be a 3-letter code")
        return v
