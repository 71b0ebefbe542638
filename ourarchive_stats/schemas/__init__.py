"""Pydantic schemas for stats records and API responses."""

from ourarchive_stats.schemas.stats import (
    AggregationErrorResponse,
    AggregationResponse,
    HistoryEntry,
    StatsCounts,
    StatsSnapshot,
)

__all__ = [
    "StatsCounts",
    "StatsSnapshot",
    "HistoryEntry",
    "AggregationResponse",
    "AggregationErrorResponse",
]
