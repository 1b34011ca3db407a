"""Pure aggregation over transaction snapshots.

Each aggregator consumes transactions one at a time (``add``) and produces its
summary on demand (``result``), so callers can feed it from an in-memory list
or stream rows from the store. No aggregator performs I/O.

Sums, counts and extrema do not depend on input order. Output dictionaries are
keyed in sorted name order so identical inputs give identical output.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import AsyncIterable, Iterable, TypeVar

from txnagg.core.exceptions import NotFoundError
from txnagg.schemas.summary import (
    CategoryBreakdown,
    CategorySummaryResponse,
    CustomerSummary,
    SourceBreakdown,
    SourceSummaryResponse,
)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def _amount(txn) -> Decimal:
    amount = txn.amount
    return amount if isinstance(amount, Decimal) else Decimal(str(amount))


class _GroupTotals:
    """Running count and sum per group key."""

    def __init__(self) -> None:
        self.totals: dict[str, Decimal] = {}
        self.counts: dict[str, int] = {}
        self.total_amount = ZERO
        self.total_count = 0

    def add(self, key: str, amount: Decimal) -> None:
        self.totals[key] = self.totals.get(key, ZERO) + amount
        self.counts[key] = self.counts.get(key, 0) + 1
        self.total_amount += amount
        self.total_count += 1

    def keys(self) -> list[str]:
        return sorted(self.counts)


class CategoryAggregator:
    """Per-category total, count and average."""

    def __init__(self) -> None:
        self._groups = _GroupTotals()

    def add(self, txn) -> None:
        self._groups.add(txn.category or "", _amount(txn))

    def result(self) -> CategorySummaryResponse:
        groups = self._groups
        categories = {
            name: CategoryBreakdown(
                name=name,
                total_amount=groups.totals[name],
                count=groups.counts[name],
                average_amount=groups.totals[name] / groups.counts[name],
            )
            for name in groups.keys()
        }
        return CategorySummaryResponse(
            categories=categories,
            total_amount=groups.total_amount,
            total_transactions=groups.total_count,
        )


class SourceAggregator:
    """Per-source count, total and share of all transactions."""

    def __init__(self) -> None:
        self._groups = _GroupTotals()

    def add(self, txn) -> None:
        self._groups.add(txn.source or "", _amount(txn))

    def result(self) -> SourceSummaryResponse:
        groups = self._groups
        total = groups.total_count
        sources = {
            name: SourceBreakdown(
                name=name,
                count=groups.counts[name],
                total_amount=groups.totals[name],
                percentage=(Decimal(groups.counts[name]) * HUNDRED / Decimal(total)) if total > 0 else ZERO,
            )
            for name in groups.keys()
        }
        return SourceSummaryResponse(sources=sources, total_transactions=total)


class CustomerSummaryAggregator:
    """Summary of one customer's transactions. Other customers' rows are ignored."""

    def __init__(self, customer_id: str) -> None:
        self.customer_id = customer_id
        self._groups = _GroupTotals()
        self._sources: set[str] = set()
        self._first_date: datetime | None = None
        self._last_date: datetime | None = None
        self._name_key: tuple | None = None
        self._customer_name = ""

    def add(self, txn) -> None:
        if txn.customer_id != self.customer_id:
            return

        self._groups.add(txn.category or "", _amount(txn))
        self._sources.add(txn.source or "")

        when = txn.transaction_date
        if self._first_date is None or when < self._first_date:
            self._first_date = when
        if self._last_date is None or when > self._last_date:
            self._last_date = when

        # Name comes from the earliest transaction so input order doesn't matter.
        name_key = (when, str(txn.id))
        if self._name_key is None or name_key < self._name_key:
            self._name_key = name_key
            self._customer_name = txn.customer_name or ""

    def result(self) -> CustomerSummary:
        groups = self._groups
        if groups.total_count == 0:
            raise NotFoundError(
                details={"customer_id": self.customer_id},
                message=f"No transactions found for customer {self.customer_id}",
            )

        return CustomerSummary(
            customer_id=self.customer_id,
            customer_name=self._customer_name,
            total_amount=groups.total_amount,
            count=groups.total_count,
            average_amount=groups.total_amount / groups.total_count,
            first_date=self._first_date,
            last_date=self._last_date,
            sources=sorted(self._sources),
            category_totals={name: groups.totals[name] for name in groups.keys()},
            category_counts={name: groups.counts[name] for name in groups.keys()},
        )


A = TypeVar("A", CategoryAggregator, SourceAggregator, CustomerSummaryAggregator)


def feed(aggregator: A, transactions: Iterable) -> A:
    for txn in transactions:
        aggregator.add(txn)
    return aggregator


async def feed_async(aggregator: A, transactions: AsyncIterable) -> A:
    async for txn in transactions:
        aggregator.add(txn)
    return aggregator


def category_breakdown(transactions: Iterable) -> CategorySummaryResponse:
    """Group transactions by category."""
    return feed(CategoryAggregator(), transactions).result()


def source_breakdown(transactions: Iterable) -> SourceSummaryResponse:
    """Group transactions by source."""
    return feed(SourceAggregator(), transactions).result()


def customer_summary(customer_id: str, transactions: Iterable) -> CustomerSummary:
    """Summarize one customer's transactions.

    Raises:
        NotFoundError: If no transaction belongs to the customer
    """
    return feed(CustomerSummaryAggregator(customer_id), transactions).result()
