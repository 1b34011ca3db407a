"""Unit tests for the categorizers."""

import logging
from contextlib import asynccontextmanager
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest

from txnagg.categorization.engine import (
    RuleBasedCategorizer,
    StaticCategorizer,
    build_categorizer,
)
from txnagg.categorization.rules import OTHER
from txnagg.core.exceptions import DegradedRuleSetError


def _txn(description: str, category: str = "") -> SimpleNamespace:
    return SimpleNamespace(description=description, category=category)


def _rule(keyword: str, category_name: str, priority: int) -> SimpleNamespace:
    return SimpleNamespace(keyword=keyword, category_name=category_name, priority=priority)


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def rule_repo():
    repo = Mock()
    repo.list_active_rules = AsyncMock(
        return_value=[_rule("net", "Internet", 1), _rule("netflix", "Entertainment", 10)]
    )
    return repo


@pytest.fixture
def session_factory():
    @asynccontextmanager
    async def factory():
        yield Mock()

    return factory


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rule_categorizer(session_factory, rule_repo, clock):
    return RuleBasedCategorizer(
        session_factory,
        refresh_seconds=60,
        repository_factory=lambda session: rule_repo,
        clock=clock,
    )


class TestStaticCategorizer:
    async def test_categorizes_uncategorized_transaction(self):
        categorizer = StaticCategorizer()
        assert await categorizer.categorize(_txn("NETFLIX.COM")) == "Entertainment"

    async def test_keeps_existing_category(self):
        categorizer = StaticCategorizer()
        assert await categorizer.categorize(_txn("NETFLIX.COM", "Groceries")) == "Groceries"

    async def test_keeps_other_on_categorize(self):
        categorizer = StaticCategorizer()
        assert await categorizer.categorize(_txn("NETFLIX.COM", OTHER)) == OTHER

    async def test_recategorize_rematches_other(self):
        categorizer = StaticCategorizer()
        assert await categorizer.recategorize(_txn("NETFLIX.COM", OTHER)) == "Entertainment"

    async def test_recategorize_keeps_explicit_category(self):
        categorizer = StaticCategorizer()
        assert await categorizer.recategorize(_txn("NETFLIX.COM", "Groceries")) == "Groceries"

    async def test_categorize_is_idempotent(self):
        categorizer = StaticCategorizer()
        txn = _txn("Uber trip")
        txn.category = await categorizer.categorize(txn)
        assert await categorizer.categorize(txn) == txn.category == "Transportation"

    async def test_injected_keywords(self):
        categorizer = StaticCategorizer({"Pets": ["vet", "petshop"]})
        assert await categorizer.categorize(_txn("City Vet Clinic")) == "Pets"
        assert await categorizer.categorize(_txn("Netflix")) == OTHER

    async def test_keyword_table_is_immutable(self):
        categorizer = StaticCategorizer({"Pets": ["vet"]})
        with pytest.raises(TypeError):
            categorizer.keywords["Food"] = ("pizza",)

    async def test_empty_table_is_degraded(self, caplog):
        categorizer = StaticCategorizer({})

        with pytest.raises(DegradedRuleSetError):
            await categorizer.active_rules()

        with caplog.at_level(logging.WARNING):
            assert await categorizer.categorize(_txn("Netflix")) == OTHER
        assert "No active categorization rules" in caplog.text


class TestRuleBasedCategorizer:
    async def test_matches_by_priority(self, rule_categorizer):
        assert await rule_categorizer.match("Netflix Payment") == "Entertainment"
        assert await rule_categorizer.match("Net banking") == "Internet"

    async def test_reads_rules_without_deleted(self, rule_categorizer, rule_repo):
        await rule_categorizer.match("anything")
        rule_repo.list_active_rules.assert_awaited_once_with(include_deleted=False)

    async def test_snapshot_is_cached(self, rule_categorizer, rule_repo):
        for _ in range(5):
            await rule_categorizer.match("Netflix")
        assert rule_repo.list_active_rules.await_count == 1

    async def test_snapshot_expires(self, rule_categorizer, rule_repo, clock):
        await rule_categorizer.match("Netflix")
        clock.now = 59
        await rule_categorizer.match("Netflix")
        assert rule_repo.list_active_rules.await_count == 1

        clock.now = 60
        await rule_categorizer.match("Netflix")
        assert rule_repo.list_active_rules.await_count == 2

    async def test_invalidate_forces_reload(self, rule_categorizer, rule_repo):
        await rule_categorizer.match("Netflix")

        rule_repo.list_active_rules.return_value = [_rule("netflix", "Streaming", 5)]
        rule_categorizer.invalidate()

        assert await rule_categorizer.match("Netflix") == "Streaming"
        assert rule_repo.list_active_rules.await_count == 2

    async def test_no_rules_falls_back_to_other(self, rule_categorizer, rule_repo, caplog):
        rule_repo.list_active_rules.return_value = []

        with caplog.at_level(logging.WARNING):
            assert await rule_categorizer.categorize(_txn("Netflix")) == OTHER
        assert "No active categorization rules" in caplog.text

    async def test_store_failure_propagates(self, rule_categorizer, rule_repo):
        rule_repo.list_active_rules.side_effect = RuntimeError("store down")

        with pytest.raises(RuntimeError):
            await rule_categorizer.match("Netflix")


class TestBuildCategorizer:
    def test_static(self):
        assert isinstance(build_categorizer("static"), StaticCategorizer)

    def test_rules(self, session_factory):
        categorizer = build_categorizer("Rules", session_factory, refresh_seconds=10)
        assert isinstance(categorizer, RuleBasedCategorizer)
        assert categorizer.refresh_seconds == 10

    def test_rules_requires_session_factory(self):
        with pytest.raises(ValueError):
            build_categorizer("rules")

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            build_categorizer("ml")
