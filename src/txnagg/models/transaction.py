"""Transaction model representing records ingested from upstream sources."""
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, validates

from txnagg.models.base import BaseModel

CREDIT = "Credit"
DEBIT = "Debit"


def transaction_type_for(amount: Decimal | int | float | None) -> str:
    """Credit for strictly positive amounts, Debit otherwise."""
    if amount is not None and amount > 0:
        return CREDIT
    return DEBIT


class Transaction(BaseModel):
    """A single financial transaction.

    ``category`` is a free string (empty means uncategorized), compared by
    value against category and rule names rather than referencing them.
    """

    __tablename__ = "transactions"

    customer_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    transaction_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[str] = mapped_column(String(100), nullable=False, default="", index=True)
    source: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="ZAR")
    type: Mapped[str] = mapped_column(String(6), nullable=False, default=DEBIT)

    __table_args__ = (
        Index("ix_transactions_is_deleted_category", "is_deleted", "category"),
    )

    @validates("amount")
    def _sync_type(self, key, amount):
        self.type = transaction_type_for(amount)
        return amount

    def __repr__(self) -> str:
        return (
            f"<Transaction(id={self.id}, customer_id={self.customer_id}, "
            f"amount={self.amount}, category={self.category!r})>"
        )
