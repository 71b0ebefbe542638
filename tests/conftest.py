"""Shared fixtures: a seeded in-memory store and a controllable clock."""

from datetime import datetime, timezone

import pytest

from ourarchive_stats.aggregators import StatsAggregator
from ourarchive_stats.stores import InMemoryDocumentStore

FIXED_NOW = datetime(2025, 12, 3, 14, 30, tzinfo=timezone.utc)


class FrozenClock:
    """Clock returning a settable moment."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class FailingStore(InMemoryDocumentStore):
    """In-memory store whose chosen operation fails for matching paths."""

    def __init__(self, operation: str, path_suffix: str):
        super().__init__()
        self.operation = operation
        self.path_suffix = path_suffix

    def _check(self, operation: str, path: str) -> None:
        if operation == self.operation and path.endswith(self.path_suffix):
            raise RuntimeError("store unavailable")

    async def count(self, collection_path):
        self._check("count", collection_path)
        return await super().count(collection_path)

    async def list_documents(self, collection_path):
        self._check("list", collection_path)
        return await super().list_documents(collection_path)

    async def set(self, document_path, data):
        self._check("set", document_path)
        await super().set(document_path, data)


def seed_example(store: InMemoryDocumentStore) -> None:
    """Three users, no containers, two households holding four items."""
    for user_id in ("u1", "u2", "u3"):
        store.add(f"users/{user_id}", {"displayName": user_id})

    store.add("households/h1", {"name": "Home"})
    store.add("households/h1/items/i1", {"type": "box", "name": "Winter clothes"})
    store.add("households/h1/items/i2", {"type": "box", "name": "Books"})
    store.add("households/h1/items/i3", {"type": None, "name": "Lamp"})

    store.add("households/h2", {"name": "Cabin"})
    store.add("households/h2/items/i4", {"type": "bin", "name": "Tools"})


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(FIXED_NOW)


@pytest.fixture
def store() -> InMemoryDocumentStore:
    store = InMemoryDocumentStore()
    seed_example(store)
    return store


@pytest.fixture
def aggregator(store, clock) -> StatsAggregator:
    return StatsAggregator(store, clock=clock)
