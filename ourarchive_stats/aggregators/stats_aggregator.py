"""Public stats aggregation: counts, item type breakdown and daily history."""

import asyncio
import time
from collections import Counter
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from functools import reduce
from typing import Any, TypeVar

import structlog

from ourarchive_stats.core.config import Settings, get_settings
from ourarchive_stats.core.exceptions import AggregationFailure, AggregationPhase
from ourarchive_stats.core.firestore import get_firestore_client
from ourarchive_stats.core.observability import (
    record_aggregation,
    record_aggregation_failure,
    record_published_counts,
    set_scheduler_running,
)
from ourarchive_stats.schemas.stats import HistoryEntry, StatsSnapshot
from ourarchive_stats.stores.base import DocumentStore, StoredDocument, join_path
from ourarchive_stats.stores.firestore import FirestoreDocumentStore

logger = structlog.get_logger()

T = TypeVar("T")

UNKNOWN_TYPE = "unknown"


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(moment: datetime) -> datetime:
    """Convert to aware UTC; naive datetimes are taken to already be UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def history_key(moment: datetime) -> str:
    """Return the history document id for a moment: its UTC date, ``YYYY-MM-DD``."""
    return as_utc(moment).date().isoformat()


def next_run_at(now: datetime, hour: int) -> datetime:
    """Return the next ``hour:00`` UTC strictly after ``now``."""
    now = as_utc(now)
    candidate = now.replace(hour=hour, minute=0, second=0, microsecond=0)
    if candidate <= now:
        candidate += timedelta(days=1)
    return candidate


@dataclass(frozen=True)
class CollectionLayout:
    """Where the aggregator reads from and publishes to."""

    users: str = "users"
    households: str = "households"
    items: str = "items"
    containers: str = "containers"
    stats: str = "public_stats"
    stats_document: str = "ourarchive"
    history: str = "history"

    @classmethod
    def from_settings(cls, settings: Settings) -> "CollectionLayout":
        return cls(
            users=settings.users_collection,
            households=settings.households_collection,
            items=settings.items_subcollection,
            containers=settings.containers_collection,
            stats=settings.stats_collection,
            stats_document=settings.stats_document,
            history=settings.history_subcollection,
        )

    def items_path(self, household_id: str) -> str:
        return join_path(self.households, household_id, self.items)

    @property
    def snapshot_path(self) -> str:
        return join_path(self.stats, self.stats_document)

    def history_path(self, day: str) -> str:
        return join_path(self.stats, self.stats_document, self.history, day)


@dataclass(frozen=True)
class HouseholdTally:
    """Item count and type breakdown contributed by one household.

    Tallies combine with ``merge``, which is associative and commutative,
    so households can be processed in any order.
    """

    item_count: int = 0
    item_types: Counter = field(default_factory=Counter)

    def merge(self, other: "HouseholdTally") -> "HouseholdTally":
        return HouseholdTally(
            item_count=self.item_count + other.item_count,
            item_types=self.item_types + other.item_types,
        )

    @classmethod
    def combine(cls, tallies: list["HouseholdTally"]) -> "HouseholdTally":
        return reduce(cls.merge, tallies, cls())


def count_item_types(items: list[StoredDocument]) -> Counter:
    """Count items per ``type``, defaulting missing or empty types to ``unknown``."""
    return Counter(str(item.data.get("type") or UNKNOWN_TYPE) for item in items)


async def _gather_all(*aws: Awaitable[Any]) -> list[Any]:
    """Await everything, then raise the first error if any.

    Unlike a plain gather, no sibling read is left running once an
    error is raised.
    """
    results = await asyncio.gather(*aws, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return results


class StatsAggregator:
    """Computes public stats from the document store and publishes them.

    Each run counts users and containers, lists households, tallies items
    per household, then writes the snapshot followed by that day's history
    entry. Every read finishes before the first write, so a failed run
    leaves previously published data untouched.

    Usage:
        aggregator = StatsAggregator(InMemoryDocumentStore())
        snapshot = await aggregator.compute_and_publish_stats()

        # Or run daily at midnight UTC in the background:
        await aggregator.start()
        # ... later ...
        await aggregator.stop()
    """

    def __init__(
        self,
        store: DocumentStore,
        layout: CollectionLayout | None = None,
        household_concurrency: int = 10,
        schedule_hour_utc: int = 0,
        clock: Callable[[], datetime] = utcnow,
    ):
        """Initialize the aggregator.

        Args:
            store: Document store to read from and publish to.
            layout: Collection names and publish paths.
            household_concurrency: Households tallied at the same time.
            schedule_hour_utc: Hour of day (UTC) for scheduled runs.
            clock: Source of the run timestamp.
        """
        self._store = store
        self._layout = layout or CollectionLayout()
        self._household_concurrency = household_concurrency
        self._schedule_hour_utc = schedule_hour_utc
        self._clock = clock
        self._running = False
        self._task: asyncio.Task | None = None
        self._runs = 0
        self._failures = 0
        self._last_run_at: datetime | None = None
        self._last_error: str | None = None

    @property
    def layout(self) -> CollectionLayout:
        return self._layout

    async def _guard(
        self,
        phase: AggregationPhase,
        path: str,
        operation: Callable[[], Awaitable[T]],
    ) -> T:
        try:
            return await operation()
        except Exception as e:
            raise AggregationFailure(phase, path, e) from e

    async def _count(self, path: str) -> int:
        return await self._guard(
            AggregationPhase.COUNT, path, lambda: self._store.count(path)
        )

    async def _list(self, path: str) -> list[StoredDocument]:
        return await self._guard(
            AggregationPhase.LIST, path, lambda: self._store.list_documents(path)
        )

    async def _write(self, path: str, data: dict[str, Any]) -> None:
        await self._guard(
            AggregationPhase.WRITE, path, lambda: self._store.set(path, data)
        )

    async def _tally_household(
        self,
        household_id: str,
        semaphore: asyncio.Semaphore,
    ) -> HouseholdTally:
        path = self._layout.items_path(household_id)
        async with semaphore:
            # Cardinality comes from the count query, types from the listing
            item_count, items = await _gather_all(self._count(path), self._list(path))
        return HouseholdTally(item_count=item_count, item_types=count_item_types(items))

    async def compute_and_publish_stats(self, not_before: datetime | None = None) -> StatsSnapshot:
        """Compute the current stats and publish snapshot plus history entry.

        Args:
            not_before: Earliest timestamp to record. The scheduler passes
                its target time so a wall clock lagging the event loop
                cannot file a midnight run under the previous day.

        Returns:
            The published snapshot.

        Raises:
            AggregationFailure: A store read or write failed. Nothing is
                written when a read fails; if the history write fails the
                snapshot has already been replaced.
        """
        logger.info("Starting stats aggregation")

        user_count, households, container_count = await _gather_all(
            self._count(self._layout.users),
            self._list(self._layout.households),
            self._count(self._layout.containers),
        )
        logger.info(
            "Top-level counts fetched",
            users=user_count,
            households=len(households),
            containers=container_count,
        )

        semaphore = asyncio.Semaphore(self._household_concurrency)
        tallies = await _gather_all(
            *(self._tally_household(household.id, semaphore) for household in households)
        )
        total = HouseholdTally.combine(tallies)
        logger.info(
            "Items tallied",
            items=total.item_count,
            item_types=dict(total.item_types),
        )

        now = as_utc(self._clock())
        if not_before is not None and now < as_utc(not_before):
            now = as_utc(not_before)
        snapshot = StatsSnapshot(
            user_count=user_count,
            household_count=len(households),
            item_count=total.item_count,
            container_count=container_count,
            item_types=dict(total.item_types),
            last_updated=now,
        )

        await self._write(self._layout.snapshot_path, snapshot.to_document())
        logger.info("Stats snapshot written", path=self._layout.snapshot_path)

        day = history_key(now)
        history_path = self._layout.history_path(day)
        await self._write(history_path, HistoryEntry.from_snapshot(snapshot).to_document())
        logger.info("History entry written", date=day, path=history_path)

        return snapshot

    async def run(self, trigger: str, not_before: datetime | None = None) -> StatsSnapshot:
        """Run one aggregation and record its outcome.

        Args:
            trigger: What started the run (``scheduled``, ``http``, ``cli``).
            not_before: Passed through to ``compute_and_publish_stats``.
        """
        start_time = time.perf_counter()
        self._last_run_at = as_utc(self._clock())

        try:
            snapshot = await self.compute_and_publish_stats(not_before=not_before)
        except AggregationFailure as e:
            self._failures += 1
            self._last_error = str(e)
            record_aggregation_failure(e.phase.value)
            raise
        except Exception as e:
            self._failures += 1
            self._last_error = str(e)
            record_aggregation_failure("unexpected")
            raise

        duration = time.perf_counter() - start_time
        self._runs += 1
        self._last_error = None
        record_aggregation(trigger, duration, snapshot.household_count)
        record_published_counts(
            users=snapshot.user_count,
            households=snapshot.household_count,
            items=snapshot.item_count,
            containers=snapshot.container_count,
        )

        logger.info(
            "Stats aggregation complete",
            trigger=trigger,
            households=snapshot.household_count,
            items=snapshot.item_count,
            duration_ms=round(duration * 1000, 2),
        )
        return snapshot

    async def start(self) -> None:
        """Start the daily background scheduler."""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._daily_loop())
        set_scheduler_running(True)

        logger.info("Stats scheduler started", hour_utc=self._schedule_hour_utc)

    async def stop(self) -> None:
        """Stop the daily background scheduler."""
        if not self._running:
            return

        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        set_scheduler_running(False)
        logger.info("Stats scheduler stopped", runs=self._runs, failures=self._failures)

    async def _daily_loop(self) -> None:
        """Background loop running one aggregation per day."""
        last_run_at: datetime | None = None
        try:
            while self._running:
                now = as_utc(self._clock())
                # Never schedule the same slot twice when the wall clock lags
                after = max(now, last_run_at) if last_run_at else now
                run_at = next_run_at(after, self._schedule_hour_utc)
                logger.info("Next scheduled aggregation", run_at=run_at.isoformat())
                await asyncio.sleep(max((run_at - now).total_seconds(), 0.0))
                last_run_at = run_at
                try:
                    await self.run(trigger="scheduled", not_before=run_at)
                except Exception as e:
                    logger.error("Scheduled aggregation failed", error=str(e), exc_info=True)
        except asyncio.CancelledError:
            pass

    @property
    def is_running(self) -> bool:
        """Check if the scheduler is running."""
        return self._running

    @property
    def stats(self) -> dict:
        """Get aggregator statistics."""
        return {
            "running": self._running,
            "runs": self._runs,
            "failures": self._failures,
            "last_run_at": self._last_run_at.isoformat() if self._last_run_at else None,
            "last_error": self._last_error,
        }


def create_aggregator(store: DocumentStore, settings: Settings | None = None) -> StatsAggregator:
    """Build an aggregator for ``store`` configured from settings."""
    settings = settings or get_settings()
    return StatsAggregator(
        store,
        layout=CollectionLayout.from_settings(settings),
        household_concurrency=settings.household_concurrency,
        schedule_hour_utc=settings.schedule_hour_utc,
    )


# Global aggregator instance
_aggregator: StatsAggregator | None = None


def get_aggregator() -> StatsAggregator:
    """Get the global aggregator instance, backed by Firestore."""
    global _aggregator
    if _aggregator is None:
        _aggregator = create_aggregator(FirestoreDocumentStore(get_firestore_client()))
    return _aggregator


async def start_aggregator() -> None:
    """Start the global aggregator's scheduler."""
    aggregator = get_aggregator()
    await aggregator.start()


async def stop_aggregator() -> None:
    """Stop the global aggregator's scheduler."""
    if _aggregator is None:
        return
    await _aggregator.stop()
