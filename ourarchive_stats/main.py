"""FastAPI application entry point for the OurArchive stats service."""

from contextlib import asynccontextmanager
from typing import Annotated, AsyncGenerator

import structlog
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ourarchive_stats.aggregators import (
    StatsAggregator,
    get_aggregator,
    start_aggregator,
    stop_aggregator,
)
from ourarchive_stats.api import stats_router
from ourarchive_stats.core.config import get_settings
from ourarchive_stats.core.firestore import reset_firestore_client
from ourarchive_stats.core.observability import (
    RequestIDMiddleware,
    RequestLoggingMiddleware,
    setup_observability,
)

settings = get_settings()
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info("Starting OurArchive Stats", version=settings.app_version)

    if settings.scheduler_enabled:
        await start_aggregator()
    else:
        logger.info("Stats scheduler disabled; relying on external trigger")

    yield

    logger.info("Shutting down OurArchive Stats")

    await stop_aggregator()
    reset_firestore_client()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Publishes daily OurArchive usage stats",
    lifespan=lifespan,
)

# Set up observability (logging, tracing, metrics, error tracking)
setup_observability(app)

# Middleware stack (first added = outermost)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(RequestIDMiddleware)

# The stats are public; any origin may trigger a refresh
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

app.include_router(stats_router)


@app.get("/health")
async def health_check(
    aggregator: Annotated[StatsAggregator, Depends(get_aggregator)],
) -> dict:
    """Health check endpoint."""
    healthy = aggregator.is_running or not settings.scheduler_enabled
    return {
        "status": "healthy" if healthy else "degraded",
        "service": "stats",
        "scheduler_running": aggregator.is_running,
    }


@app.get("/stats")
async def service_stats(
    aggregator: Annotated[StatsAggregator, Depends(get_aggregator)],
) -> dict:
    """Get service statistics."""
    return {
        "service": "stats",
        "version": settings.app_version,
        "aggregator": aggregator.stats,
    }


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Welcome to OurArchive Stats", "version": settings.app_version}
