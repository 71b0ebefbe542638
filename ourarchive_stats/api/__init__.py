"""HTTP API routers."""

from ourarchive_stats.api.stats import router as stats_router

__all__ = ["stats_router"]
