"""Seed default categories and keyword rules."""

import logging
from typing import Mapping, Sequence
from uuid import uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from txnagg.categorization.rules import (
    CATEGORY_DESCRIPTIONS,
    DEFAULT_CATEGORY_KEYWORDS,
    OTHER,
    TOP_PRIORITY,
    rules_from_keywords,
)
from txnagg.models.category import Category, CategoryRule
from txnagg.repositories.category import CategoryRepository

logger = logging.getLogger(__name__)


class CategorySeeder:
    """Writes the default category table and one rule per keyword.

    Categories and rules are written in a single commit, so a failed seed
    leaves nothing behind and the next run starts over. Seeding is skipped
    when any category already exists.
    """

    def __init__(
        self,
        db: AsyncSession,
        keywords: Mapping[str, Sequence[str]] = DEFAULT_CATEGORY_KEYWORDS,
        descriptions: Mapping[str, str] = CATEGORY_DESCRIPTIONS,
    ):
        self.db = db
        self.keywords = keywords
        self.descriptions = descriptions
        self.category_repo = CategoryRepository(db)

    async def seed(self) -> bool:
        """Seed categories and rules. Returns False when data was already present."""
        if await self.category_repo.count(include_deleted=True) > 0:
            logger.info("Categories already seeded; skipping")
            return False

        categories = {
            name: Category(
                id=uuid4(),
                name=name,
                description=self.descriptions.get(name, ""),
                keywords=list(words),
            )
            for name, words in self.keywords.items()
        }
        if OTHER not in categories:
            categories[OTHER] = Category(
                id=uuid4(), name=OTHER, description=self.descriptions.get(OTHER, ""), keywords=[]
            )

        rules = [
            CategoryRule(
                category_id=categories[rule.category_name].id,
                category_name=rule.category_name,
                keyword=rule.keyword,
                priority=rule.priority,
            )
            for rule in rules_from_keywords(self.keywords, top_priority=TOP_PRIORITY)
        ]
        self.db.add_all(list(categories.values()))
        self.db.add_all(rules)
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            "Seeded categorization data",
            extra={"categories": len(categories), "rules": len(rules)},
        )
        return True


async def seed_default_categories(session_factory) -> bool:
    """Run the seeder in its own session. Failures are logged and reported as False."""
    try:
        async with session_factory() as session:
            return await CategorySeeder(session).seed()
    except Exception:
        logger.exception("Seeding categories failed")
        return False
