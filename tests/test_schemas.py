"""Tests for stats record schemas."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from ourarchive_stats.schemas import HistoryEntry, StatsSnapshot

NOW = datetime(2025, 12, 3, 0, 0, tzinfo=timezone.utc)


def make_snapshot(**overrides) -> StatsSnapshot:
    fields = {
        "user_count": 3,
        "household_count": 2,
        "item_count": 4,
        "container_count": 0,
        "item_types": {"box": 2, "unknown": 1, "bin": 1},
        "last_updated": NOW,
    }
    fields.update(overrides)
    return StatsSnapshot(**fields)


def test_document_uses_camel_case_keys():
    assert set(make_snapshot().to_document()) == {
        "userCount",
        "householdCount",
        "itemCount",
        "containerCount",
        "itemTypes",
        "lastUpdated",
    }


def test_accepts_camel_case_input():
    snapshot = StatsSnapshot.model_validate(make_snapshot().to_document())

    assert snapshot == make_snapshot()


def test_history_entry_copies_counts_and_dates_them():
    entry = HistoryEntry.from_snapshot(make_snapshot())

    document = entry.to_document()
    assert document["date"] == NOW
    assert "lastUpdated" not in document
    assert document["itemTypes"] == {"box": 2, "unknown": 1, "bin": 1}


def test_rejects_negative_counts():
    with pytest.raises(ValidationError):
        make_snapshot(item_count=-1)
