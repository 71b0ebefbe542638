"""On-demand stats aggregation endpoint."""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from ourarchive_stats.aggregators import StatsAggregator, get_aggregator
from ourarchive_stats.schemas import AggregationErrorResponse, AggregationResponse

logger = structlog.get_logger()

router = APIRouter(tags=["stats"])


@router.api_route(
    "/aggregate",
    methods=["GET", "POST"],
    response_model=AggregationResponse,
    responses={status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": AggregationErrorResponse}},
)
async def aggregate_stats(
    aggregator: Annotated[StatsAggregator, Depends(get_aggregator)],
) -> AggregationResponse | JSONResponse:
    """Recompute and publish the public stats now.

    Useful for manual refreshes and testing; the daily schedule does the
    same work at midnight UTC.
    """
    try:
        snapshot = await aggregator.run(trigger="http")
    except Exception as e:
        logger.error("On-demand aggregation failed", error=str(e))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=AggregationErrorResponse(error=str(e)).model_dump(),
        )

    return AggregationResponse(stats=snapshot)
