"""Database models."""
from txnagg.models.category import Category, CategoryRule
from txnagg.models.transaction import Transaction

__all__ = ["Category", "CategoryRule", "Transaction"]
