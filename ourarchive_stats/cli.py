"""Command-line interface for the stats service.

Provides subcommands: `run` (one aggregation, for cron or Cloud Scheduler
jobs) and `serve` (the HTTP service with its in-process daily scheduler).
"""

import argparse
import asyncio
import json

import structlog
import uvicorn

from ourarchive_stats.aggregators import get_aggregator
from ourarchive_stats.core.config import get_settings
from ourarchive_stats.core.exceptions import AggregationFailure
from ourarchive_stats.core.observability import configure_structlog

logger = structlog.get_logger()


def cmd_run(_: argparse.Namespace) -> int:
    """Aggregate and publish once; print the snapshot as JSON.

    Returns 1 when the aggregation fails so the calling scheduler can
    apply its own retry and alerting policy.
    """
    aggregator = get_aggregator()
    try:
        snapshot = asyncio.run(aggregator.run(trigger="cli"))
    except AggregationFailure as e:
        logger.error("Stats aggregation failed", phase=e.phase.value, path=e.path, error=str(e))
        return 1

    print(json.dumps(snapshot.model_dump(by_alias=True, mode="json"), indent=2))
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Serve the HTTP API."""
    uvicorn.run("ourarchive_stats.main:app", host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level argument parser with `run` and `serve` subcommands."""
    settings = get_settings()

    p = argparse.ArgumentParser(prog="ourarchive-stats")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_run = sub.add_parser("run", help="aggregate and publish stats once")
    p_run.set_defaults(func=cmd_run)

    p_serve = sub.add_parser("serve", help="run the HTTP service")
    p_serve.add_argument("--host", default=settings.host)
    p_serve.add_argument("--port", type=int, default=settings.port)
    p_serve.set_defaults(func=cmd_serve)

    return p


def main(argv: list[str] | None = None) -> None:
    """CLI entry point: parse args, configure logging and dispatch."""
    args = build_parser().parse_args(argv)
    configure_structlog()
    raise SystemExit(args.func(args))


if __name__ == "__main__":
    main()
