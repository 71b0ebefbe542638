"""Errors raised by the stats aggregation pipeline."""

from enum import Enum


class AggregationPhase(str, Enum):
    """Store operation that was running when an aggregation failed."""

    COUNT = "count"
    LIST = "list"
    WRITE = "write"


class AggregationFailure(Exception):
    """A store read or write failed while computing or publishing stats.

    The failing store error is kept as ``__cause__`` and on ``cause``.
    Nothing is retried; callers decide whether to surface or suppress it.
    """

    def __init__(self, phase: AggregationPhase, path: str, cause: BaseException):
        self.phase = phase
        self.path = path
        self.cause = cause
        super().__init__(f"{phase.value} failed for {path}: {cause}")
