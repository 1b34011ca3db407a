"""Async SQLAlchemy repositories."""
from txnagg.repositories.category import CategoryRepository, CategoryRuleRepository
from txnagg.repositories.transaction import TransactionRepository

__all__ = ["CategoryRepository", "CategoryRuleRepository", "TransactionRepository"]
