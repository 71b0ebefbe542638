"""Pydantic schemas for published stats and trigger responses."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class StatsCounts(BaseModel):
    """Counts shared by the current snapshot and its daily history entries.

    Stored and serialized with camelCase keys (``userCount``, ``itemTypes``).
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    user_count: int = Field(ge=0, description="Number of user records")
    household_count: int = Field(ge=0, description="Number of households scanned")
    item_count: int = Field(ge=0, description="Items across all households")
    container_count: int = Field(ge=0, description="Number of containers")
    item_types: dict[str, int] = Field(
        default_factory=dict,
        description="Item count per type; missing types are counted as 'unknown'",
    )

    def to_document(self) -> dict[str, Any]:
        """Return the record as written to the store.

        Datetimes stay as objects so Firestore stores them as timestamps.
        """
        return self.model_dump(by_alias=True)


class StatsSnapshot(StatsCounts):
    """The current public stats record, replaced on every run."""

    last_updated: datetime = Field(description="When the snapshot was computed (UTC)")


class HistoryEntry(StatsCounts):
    """Archived copy of a snapshot, one per UTC calendar day."""

    date: datetime = Field(description="When the archived snapshot was computed (UTC)")

    @classmethod
    def from_snapshot(cls, snapshot: StatsSnapshot) -> "HistoryEntry":
        """Build the history entry for a snapshot."""
        return cls(
            user_count=snapshot.user_count,
            household_count=snapshot.household_count,
            item_count=snapshot.item_count,
            container_count=snapshot.container_count,
            item_types=dict(snapshot.item_types),
            date=snapshot.last_updated,
        )


class AggregationResponse(BaseModel):
    """Successful on-demand aggregation."""

    success: bool = True
    stats: StatsSnapshot


class AggregationErrorResponse(BaseModel):
    """Failed on-demand aggregation."""

    success: bool = False
    error: str
