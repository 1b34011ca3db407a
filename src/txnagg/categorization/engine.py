"""Categorizers: apply keyword rules to transactions.

Two flavors share one contract so callers can swap them freely:

- StaticCategorizer: an injected, immutable keyword table. No store access.
- RuleBasedCategorizer: rules loaded from the store and held in a cached
  snapshot, refreshed after ``refresh_seconds`` or on ``invalidate()``.
"""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Callable, Mapping, Sequence

from txnagg.categorization.rules import (
    DEFAULT_CATEGORY_KEYWORDS,
    OTHER,
    KeywordRule,
    match_description,
    rules_from_keywords,
    sort_rules,
)
from txnagg.core.exceptions import DegradedRuleSetError

logger = logging.getLogger(__name__)


class Categorizer(ABC):
    """Assigns a category name to a transaction."""

    async def categorize(self, transaction) -> str:
        """Return the transaction's category, matching rules only when it has none.

        An existing explicit category is never overwritten through this path.
        """
        if transaction.category:
            return transaction.category
        return await self.match(transaction.description)

    async def recategorize(self, transaction) -> str:
        """Like :meth:`categorize`, but also re-matches transactions sitting in ``Other``."""
        if transaction.category and transaction.category != OTHER:
            return transaction.category
        return await self.match(transaction.description)

    async def match(self, description: str | None) -> str:
        """Match a description against the active rule set.

        An empty rule set is a degraded mode: it is logged and ``Other`` is returned.
        """
        try:
            rules = await self.active_rules()
        except DegradedRuleSetError as exc:
            logger.warning(
                "No active categorization rules; falling back to %s",
                OTHER,
                extra={"error_code": exc.error_code},
            )
            return OTHER
        return match_description(description, rules)

    @abstractmethod
    async def active_rules(self) -> Sequence[KeywordRule]:
        """Active rules in evaluation order. Raises DegradedRuleSetError when there are none."""

    def invalidate(self) -> None:
        """Drop any cached rules so the next match sees current data."""


class StaticCategorizer(Categorizer):
    """Categorizer over a fixed category -> keywords table."""

    def __init__(self, keywords: Mapping[str, Sequence[str]] = DEFAULT_CATEGORY_KEYWORDS):
        self.keywords = MappingProxyType({name: tuple(words) for name, words in keywords.items()})
        self._rules = tuple(sort_rules(rules_from_keywords(self.keywords)))

    async def active_rules(self) -> Sequence[KeywordRule]:
        if not self._rules:
            raise DegradedRuleSetError(details={"categorizer": "static"})
        return self._rules


class RuleBasedCategorizer(Categorizer):
    """Categorizer backed by the category rule store.

    Rules are read once per refresh window instead of once per transaction.
    """

    def __init__(
        self,
        session_factory,
        refresh_seconds: float = 300,
        repository_factory: Callable | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the categorizer.

        Args:
            session_factory: Callable returning an async session context manager
            refresh_seconds: Maximum age of the cached rule snapshot
            repository_factory: Builds a rule repository from a session
            clock: Monotonic time source
        """
        if repository_factory is None:
            from txnagg.repositories.category import CategoryRuleRepository

            repository_factory = CategoryRuleRepository
        self.session_factory = session_factory
        self.refresh_seconds = refresh_seconds
        self.repository_factory = repository_factory
        self.clock = clock
        self._snapshot: tuple[KeywordRule, ...] | None = None
        self._loaded_at: float | None = None
        self._lock = asyncio.Lock()

    def invalidate(self) -> None:
        self._snapshot = None
        self._loaded_at = None

    def _is_stale(self) -> bool:
        if self._snapshot is None or self._loaded_at is None:
            return True
        return (self.clock() - self._loaded_at) >= self.refresh_seconds

    async def refresh(self) -> tuple[KeywordRule, ...]:
        """Reload the rule snapshot from the store."""
        async with self.session_factory() as session:
            repo = self.repository_factory(session)
            rows = await repo.list_active_rules(include_deleted=False)

        # Detach from the session: keep plain values only.
        snapshot = tuple(
            sort_rules(
                KeywordRule(
                    keyword=row.keyword,
                    category_name=row.category_name,
                    priority=row.priority,
                )
                for row in rows
            )
        )
        self._snapshot = snapshot
        self._loaded_at = self.clock()
        logger.debug("Loaded %d categorization rules", len(snapshot))
        return snapshot

    async def active_rules(self) -> Sequence[KeywordRule]:
        if self._is_stale():
            async with self._lock:
                if self._is_stale():
                    await self.refresh()

        if not self._snapshot:
            raise DegradedRuleSetError(details={"categorizer": "rules"})
        return self._snapshot


def build_categorizer(kind: str, session_factory=None, refresh_seconds: float = 300) -> Categorizer:
    """Build the categorizer named by configuration ("rules" or "static")."""
    kind = (kind or "").strip().lower()
    if kind == "static":
        return StaticCategorizer()
    if kind == "rules":
        if session_factory is None:
            raise ValueError("rules categorizer requires a session factory")
        return RuleBasedCategorizer(session_factory, refresh_seconds=refresh_seconds)
    raise ValueError(f"unknown categorizer: {kind!r}")
