"""Stats aggregation logic."""

from ourarchive_stats.aggregators.stats_aggregator import (
    CollectionLayout,
    HouseholdTally,
    StatsAggregator,
    create_aggregator,
    get_aggregator,
    history_key,
    start_aggregator,
    stop_aggregator,
)

__all__ = [
    "CollectionLayout",
    "HouseholdTally",
    "StatsAggregator",
    "create_aggregator",
    "get_aggregator",
    "history_key",
    "start_aggregator",
    "stop_aggregator",
]
