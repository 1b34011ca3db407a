"""Store incoming transaction records.

Records arrive categorized or not. An empty category is left for the
reconciliation worker to fill in.
"""

import logging
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from txnagg.config import settings
from txnagg.models.transaction import Transaction
from txnagg.repositories.transaction import TransactionRepository
from txnagg.schemas.transaction import TransactionCreate

logger = logging.getLogger(__name__)


def build_transaction(record: TransactionCreate, default_currency: str | None = None) -> Transaction:
    """Build a Transaction row from a validated record. ``type`` follows the amount sign."""
    return Transaction(
        customer_id=record.customer_id,
        customer_name=record.customer_name,
        amount=record.amount,
        transaction_date=record.transaction_date,
        description=record.description,
        category=record.category or "",
        source=record.source,
        currency=record.currency or default_currency or settings.default_currency,
    )


async def ingest_transactions(
    db: AsyncSession,
    records: Iterable[TransactionCreate],
    default_currency: str | None = None,
) -> list[Transaction]:
    """Store a batch of records in one commit.

    Raises:
        SQLAlchemyError: If the commit fails; nothing from the batch is stored
    """
    transactions = [build_transaction(record, default_currency) for record in records]
    if not transactions:
        return []

    await TransactionRepository(db).save_all(transactions)
    uncategorized = sum(1 for txn in transactions if not txn.category)
    logger.info(
        "Ingested %d transactions",
        len(transactions),
        extra={"uncategorized": uncategorized},
    )
    return transactions
