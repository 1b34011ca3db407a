"""Spending categories and the keyword rules that assign them."""
from uuid import UUID

from sqlalchemy import JSON, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from txnagg.models.base import BaseModel


class Category(BaseModel):
    """A spending category. ``name`` is the value stored on transactions."""

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    keywords: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name={self.name})>"


class CategoryRule(BaseModel):
    """Keyword rule mapping a description substring to a category.

    ``category_id`` is a weak reference; ``category_name`` is denormalized so the
    rule can be applied without loading the category.
    """

    __tablename__ = "category_rules"

    category_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    category_name: Mapped[str] = mapped_column(String(100), nullable=False)
    keyword: Mapped[str] = mapped_column(String(255), nullable=False)
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)

    def __repr__(self) -> str:
        return (
            f"<CategoryRule(keyword={self.keyword!r}, category={self.category_name}, "
            f"priority={self.priority})>"
        )
