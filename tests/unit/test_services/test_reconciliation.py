"""Unit tests for the reconciliation worker."""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, Mock

import pytest

from txnagg.categorization.engine import StaticCategorizer
from txnagg.categorization.rules import OTHER
from txnagg.services.reconciliation import ReconciliationWorker, WorkerState

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


class FakeTransactionRepository:
    """In-memory stand-in for TransactionRepository's reconciliation queries."""

    def __init__(self, transactions):
        self.transactions = transactions
        self.saved_batches = []
        self.fail_saves = False

    async def get_reconciliation_candidates(self, limit, *, include_deleted, after=None):
        assert include_deleted is False
        rows = sorted(
            (t for t in self.transactions if t.category in (None, "", OTHER)),
            key=lambda t: (t.created_at, t.id),
        )
        if after is not None:
            rows = [t for t in rows if (t.created_at, t.id) > after]
        return rows[:limit]

    async def save_all(self, objs):
        if self.fail_saves:
            raise RuntimeError("commit failed")
        self.saved_batches.append(list(objs))
        return len(self.saved_batches[-1])


@pytest.fixture
def stored(make_transaction):
    """A small store snapshot, oldest first."""
    rows = [
        make_transaction(description="NETFLIX.COM", category=""),
        make_transaction(description="Uber trip", category=OTHER),
        make_transaction(description="Transfer to savings", category=""),
        make_transaction(description="Starbucks", category="Groceries"),
    ]
    for offset, txn in enumerate(rows):
        txn.created_at = T0 + timedelta(minutes=offset)
    return rows


@pytest.fixture
def repo(stored):
    return FakeTransactionRepository(stored)


@pytest.fixture
def session_factory():
    @asynccontextmanager
    async def factory():
        yield Mock()

    return factory


def make_worker(session_factory, repo, **kwargs):
    kwargs.setdefault("interval", 3600)
    kwargs.setdefault("retry_interval", 3600)
    return ReconciliationWorker(
        session_factory,
        StaticCategorizer(),
        repository_factory=lambda session: repo,
        **kwargs,
    )


async def wait_until(predicate, timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.01)


class TestRunCycle:
    async def test_categorizes_candidates(self, session_factory, repo, stored):
        worker = make_worker(session_factory, repo)

        changed = await worker.run_cycle()

        assert changed == 3
        assert [t.category for t in stored] == ["Entertainment", "Transportation", OTHER, "Groceries"]
        assert worker.state is WorkerState.IDLE
        assert worker.cycles_completed == 1
        assert worker.last_cycle_changes == 3

    async def test_persists_only_changed_transactions(self, session_factory, repo, stored):
        worker = make_worker(session_factory, repo)

        await worker.run_cycle()

        assert len(repo.saved_batches) == 1
        saved = repo.saved_batches[0]
        assert stored[0] in saved and stored[1] in saved and stored[2] in saved
        assert stored[3] not in saved
        assert all(t.updated_at is not None for t in saved)

    async def test_unmatched_other_is_not_rewritten(self, session_factory, make_transaction):
        txn = make_transaction(description="Transfer to savings", category=OTHER)
        txn.created_at = T0
        repo = FakeTransactionRepository([txn])
        worker = make_worker(session_factory, repo)

        assert await worker.run_cycle() == 0
        assert repo.saved_batches == []
        assert txn.updated_at is None

    async def test_second_cycle_converges(self, session_factory, repo):
        worker = make_worker(session_factory, repo)

        await worker.run_cycle()
        assert await worker.run_cycle() == 0
        assert len(repo.saved_batches) == 1

    async def test_explicit_category_untouched(self, session_factory, repo, stored):
        worker = make_worker(session_factory, repo)

        await worker.run_cycle()
        await worker.run_cycle()

        assert stored[3].category == "Groceries"

    async def test_invalidates_rules_each_cycle(self, session_factory, repo):
        worker = make_worker(session_factory, repo)
        worker.categorizer.invalidate = Mock()

        await worker.run_cycle()
        await worker.run_cycle()

        assert worker.categorizer.invalidate.call_count == 2

    async def test_walks_backlog_larger_than_batch(self, session_factory, make_transaction):
        rows = [
            make_transaction(description="Transfer A", category=OTHER),
            make_transaction(description="Transfer B", category=OTHER),
            make_transaction(description="NETFLIX.COM", category=""),
        ]
        for offset, txn in enumerate(rows):
            txn.created_at = T0 + timedelta(minutes=offset)
        repo = FakeTransactionRepository(rows)
        worker = make_worker(session_factory, repo, batch_size=2)

        assert await worker.run_cycle() == 0
        assert await worker.run_cycle() == 1
        assert rows[2].category == "Entertainment"

    async def test_save_failure_propagates_and_keeps_cursor(self, session_factory, repo):
        repo.fail_saves = True
        worker = make_worker(session_factory, repo, batch_size=1)

        with pytest.raises(RuntimeError):
            await worker.run_cycle()

        assert worker.cycles_completed == 0
        assert worker.state is WorkerState.IDLE
        assert worker._cursor is None

    def test_rejects_empty_batch(self, session_factory, repo):
        with pytest.raises(ValueError):
            make_worker(session_factory, repo, batch_size=0)


class TestRunLoop:
    async def test_failed_cycle_backs_off_and_resumes(self, session_factory, repo):
        worker = make_worker(session_factory, repo, retry_interval=0.01)
        worker.run_cycle = AsyncMock(side_effect=[RuntimeError("db down"), 0])

        worker.start()
        await wait_until(lambda: worker.run_cycle.await_count >= 2)
        await worker.stop(timeout=1)

        assert worker.failures == 1
        assert worker.state is WorkerState.STOPPED

    async def test_stop_interrupts_sleep(self, session_factory, repo):
        worker = make_worker(session_factory, repo)
        worker.run_cycle = AsyncMock(return_value=0)

        worker.start()
        await wait_until(lambda: worker.run_cycle.await_count == 1)

        loop = asyncio.get_running_loop()
        started = loop.time()
        await worker.stop(timeout=5)

        assert loop.time() - started < 1
        assert worker.run_cycle.await_count == 1
        assert worker.state is WorkerState.STOPPED

    async def test_stop_during_startup_delay_runs_no_cycle(self, session_factory, repo):
        worker = make_worker(session_factory, repo, startup_delay=3600)
        worker.run_cycle = AsyncMock(return_value=0)

        worker.start()
        await asyncio.sleep(0)
        await worker.stop(timeout=1)

        worker.run_cycle.assert_not_awaited()
        assert worker.state is WorkerState.STOPPED

    async def test_cancel_marks_stopped(self, session_factory, repo):
        worker = make_worker(session_factory, repo)
        worker.run_cycle = AsyncMock(return_value=0)

        task = worker.start()
        await wait_until(lambda: worker.run_cycle.await_count == 1)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert worker.state is WorkerState.STOPPED

    async def test_stop_without_start(self, session_factory, repo):
        worker = make_worker(session_factory, repo)
        await worker.stop()
        assert worker.state is WorkerState.STOPPED
