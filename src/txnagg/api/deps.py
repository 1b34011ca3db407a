"""FastAPI dependency injection for the query service."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from txnagg.db.session import get_db
from txnagg.services.transactions import TransactionQueryService


async def get_transaction_service(
    db: AsyncSession = Depends(get_db),
) -> TransactionQueryService:
    """
    Get transaction query service instance.

    Args:
        db: Database session

    Returns:
        TransactionQueryService bound to the request's session
    """
    return TransactionQueryService(db)
