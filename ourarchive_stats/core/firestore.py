"""Firestore client configuration for the stats service."""

import structlog
from google.cloud import firestore

from ourarchive_stats.core.config import get_settings

logger = structlog.get_logger()

# Created on first use so importing the app never needs credentials
_client: firestore.AsyncClient | None = None


def get_firestore_client() -> firestore.AsyncClient:
    """Get the process-wide async Firestore client, creating it if necessary.

    Credentials are resolved by Google Application Default Credentials
    (``GOOGLE_APPLICATION_CREDENTIALS``, metadata server, or the emulator
    when ``FIRESTORE_EMULATOR_HOST`` is set).
    """
    global _client
    if _client is None:
        settings = get_settings()
        _client = firestore.AsyncClient(
            project=settings.google_cloud_project,
            database=settings.firestore_database,
        )
        logger.info(
            "Firestore client created",
            project=_client.project,
            database=settings.firestore_database,
        )
    return _client


def reset_firestore_client() -> None:
    """Drop the cached client so the next call builds a fresh one."""
    global _client
    _client = None
