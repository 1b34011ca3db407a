"""Multi-criteria transaction search request."""

from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

TEXT_CRITERIA = (
    "customer_id",
    "customer_name",
    "description",
    "category",
    "source",
    "currency",
    "type",
)
VALUE_CRITERIA = ("id", "min_amount", "max_amount", "start_date", "end_date")


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes so mixed bounds stay comparable."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class TransactionSearch(BaseModel):
    """Optional search fields; all given fields must match.

    Blank strings are treated as not given.
    """

    id: UUID | None = None
    customer_id: str | None = Field(None, description="Exact customer ID")
    customer_name: str | None = Field(None, description="Customer name contains (case-insensitive)")
    min_amount: Decimal | None = None
    max_amount: Decimal | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    description: str | None = Field(None, description="Description contains (case-insensitive)")
    category: str | None = None
    source: str | None = None
    currency: str | None = None
    type: str | None = Field(None, description="Debit or Credit")

    page_no: int = Field(1, ge=1)
    page_size: int = Field(20, ge=1)

    @field_validator(*TEXT_CRITERIA)
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        return v or None

    @field_validator("start_date", "end_date")
    @classmethod
    def dates_as_utc(cls, v: datetime | None) -> datetime | None:
        return as_utc(v)

    def has_criteria(self) -> bool:
        """True when at least one search field is set."""
        return any(getattr(self, name) is not None for name in TEXT_CRITERIA + VALUE_CRITERIA)
