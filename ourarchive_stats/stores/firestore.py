"""Firestore implementation of the document store contract."""

from typing import Any

import structlog
from google.cloud import firestore

from ourarchive_stats.stores.base import StoredDocument

logger = structlog.get_logger()


class FirestoreDocumentStore:
    """Document store backed by an async Firestore client.

    Counts use Firestore aggregation queries, so only the cardinality
    crosses the wire.

    Usage:
        store = FirestoreDocumentStore(firestore.AsyncClient())
        users = await store.count("users")
    """

    def __init__(self, client: firestore.AsyncClient):
        self._client = client

    async def count(self, collection_path: str) -> int:
        """Count documents in a collection with a server-side aggregation."""
        query = self._client.collection(collection_path).count(alias="count")
        results = await query.get()
        # One result set holding the single "count" aggregation
        value = results[0][0].value
        logger.debug("Counted collection", path=collection_path, count=value)
        return int(value)

    async def list_documents(self, collection_path: str) -> list[StoredDocument]:
        """Stream every document in a collection."""
        documents: list[StoredDocument] = []
        async for snapshot in self._client.collection(collection_path).stream():
            documents.append(StoredDocument(id=snapshot.id, data=snapshot.to_dict() or {}))
        return documents

    async def set(self, document_path: str, data: dict[str, Any]) -> None:
        """Overwrite a document (no merge)."""
        await self._client.document(document_path).set(data)
