"""Background reconciliation of transaction categories.

The worker repeatedly scans a bounded batch of candidate transactions (empty
category or ``Other``), re-applies the categorizer, and writes back only the
transactions whose category changed:

    Idle -> Scanning -> Applying -> Persisting -> Idle  (... until Stopped)

Candidates that fail to persist still satisfy the candidate predicate, so they
are picked up again on a later cycle. Re-running a cycle over converged data
changes nothing.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import Callable

from txnagg.categorization.engine import Categorizer
from txnagg.models.base import utcnow
from txnagg.repositories.transaction import CandidateCursor, TransactionRepository

logger = logging.getLogger(__name__)


class WorkerState(str, enum.Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    APPLYING = "applying"
    PERSISTING = "persisting"
    STOPPED = "stopped"


class ReconciliationWorker:
    """Single background loop keeping stored categories up to date.

    Only one worker should run per deployment. Two workers would both
    process the same candidates; categorization is idempotent so that wastes
    work without corrupting data, but nothing guarantees at-most-once processing.
    """

    def __init__(
        self,
        session_factory,
        categorizer: Categorizer,
        *,
        interval: float = 900,
        retry_interval: float = 60,
        startup_delay: float = 0,
        batch_size: int = 100,
        repository_factory: Callable = TransactionRepository,
    ):
        """Initialize the worker.

        Args:
            session_factory: Callable returning an async session context manager
            categorizer: Categorizer used to recompute categories
            interval: Seconds between successful cycles
            retry_interval: Seconds to back off after a failed cycle
            startup_delay: Seconds to wait before the first cycle
            batch_size: Maximum candidates examined per cycle
            repository_factory: Builds a transaction repository from a session
        """
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.session_factory = session_factory
        self.categorizer = categorizer
        self.interval = interval
        self.retry_interval = retry_interval
        self.startup_delay = startup_delay
        self.batch_size = batch_size
        self.repository_factory = repository_factory

        self.state = WorkerState.IDLE
        self.cycles_completed = 0
        self.failures = 0
        self.last_cycle_changes = 0
        self.total_changes = 0

        self._cursor: CandidateCursor | None = None
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task | None = None

    @property
    def stopping(self) -> bool:
        return self._stop_event.is_set()

    async def run_cycle(self) -> int:
        """Run one scan/apply/persist pass. Returns the number of transactions changed."""
        # Rules may have changed since the last cycle.
        self.categorizer.invalidate()

        try:
            async with self.session_factory() as session:
                repo = self.repository_factory(session)

                self.state = WorkerState.SCANNING
                candidates = await repo.get_reconciliation_candidates(
                    self.batch_size, include_deleted=False, after=self._cursor
                )
                if candidates:
                    logger.info("Found %d candidate transactions to categorize", len(candidates))

                self.state = WorkerState.APPLYING
                dirty = []
                now = utcnow()
                for txn in candidates:
                    category = await self.categorizer.recategorize(txn)
                    if category != txn.category:
                        txn.category = category
                        txn.updated_at = now
                        dirty.append(txn)

                if dirty:
                    self.state = WorkerState.PERSISTING
                    await repo.save_all(dirty)
                    logger.info("Categorized %d transactions", len(dirty))
        finally:
            if self.state is not WorkerState.STOPPED:
                self.state = WorkerState.IDLE

        # A short batch means the end of the backlog: start over from the top next time.
        if len(candidates) < self.batch_size:
            self._cursor = None
        else:
            last = candidates[-1]
            self._cursor = (last.created_at, last.id)

        self.cycles_completed += 1
        self.last_cycle_changes = len(dirty)
        self.total_changes += len(dirty)
        return len(dirty)

    async def _wait(self, seconds: float) -> bool:
        """Sleep up to ``seconds``. Returns True as soon as a stop is requested."""
        if self._stop_event.is_set():
            return True
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=max(0, seconds))
        except asyncio.TimeoutError:
            return False
        return True

    async def run(self) -> None:
        """Loop until stopped. A failed cycle is logged and retried after a shorter back-off."""
        try:
            if self.startup_delay and await self._wait(self.startup_delay):
                return

            logger.info(
                "Reconciliation worker started",
                extra={"interval_seconds": self.interval, "batch_size": self.batch_size},
            )
            while not self._stop_event.is_set():
                delay = self.interval
                try:
                    await self.run_cycle()
                except Exception:
                    self.failures += 1
                    delay = self.retry_interval
                    logger.exception(
                        "Reconciliation cycle failed; retrying in %s seconds", self.retry_interval
                    )

                if await self._wait(delay):
                    break
        finally:
            self.state = WorkerState.STOPPED
            logger.info("Reconciliation worker stopped")

    def start(self) -> asyncio.Task:
        """Start the loop as a background task on the running event loop."""
        if self._task is not None and not self._task.done():
            return self._task
        self._stop_event.clear()
        self._task = asyncio.create_task(self.run(), name="reconciliation-worker")
        return self._task

    async def stop(self, timeout: float | None = None) -> None:
        """Request a stop and wait for the loop to exit.

        The inter-cycle sleep ends immediately. A cycle already in progress is
        allowed to finish unless ``timeout`` elapses first, in which case the
        task is cancelled.
        """
        self._stop_event.set()
        task = self._task
        if task is None:
            self.state = WorkerState.STOPPED
            return
        try:
            await asyncio.wait_for(asyncio.shield(task), timeout=timeout)
        except asyncio.TimeoutError:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        finally:
            self._task = None
