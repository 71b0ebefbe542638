"""In-memory document store for tests and local runs."""

import copy
from typing import Any

from ourarchive_stats.stores.base import StoredDocument


def _split(document_path: str) -> tuple[str, str]:
    collection_path, _, document_id = document_path.rpartition("/")
    if not collection_path or not document_id:
        raise ValueError(f"Not a document path: {document_path!r}")
    return collection_path, document_id


class InMemoryDocumentStore:
    """Dict-backed store with the same contract as Firestore.

    Documents live in a flat mapping keyed by their full path; collections
    exist implicitly while they hold documents. Every ``set`` is also
    appended to ``writes`` so callers can inspect write order.

    Args:
        supports_count: When False, ``count`` raises ``NotImplementedError``
            the way a store without a server-side count primitive would.
    """

    def __init__(self, supports_count: bool = True):
        self.supports_count = supports_count
        self._documents: dict[str, dict[str, Any]] = {}
        self.writes: list[str] = []

    def add(self, document_path: str, data: dict[str, Any] | None = None) -> None:
        """Seed a document without recording it as a write."""
        _split(document_path)
        self._documents[document_path] = copy.deepcopy(data or {})

    def get(self, document_path: str) -> dict[str, Any] | None:
        """Return a copy of a document, or None if it does not exist."""
        data = self._documents.get(document_path)
        return copy.deepcopy(data) if data is not None else None

    def _ids_in(self, collection_path: str) -> list[str]:
        ids = []
        for path in self._documents:
            parent, document_id = _split(path)
            if parent == collection_path:
                ids.append(document_id)
        return sorted(ids)

    async def count(self, collection_path: str) -> int:
        if not self.supports_count:
            raise NotImplementedError(
                f"Store has no count query for {collection_path!r}"
            )
        return len(self._ids_in(collection_path))

    async def list_documents(self, collection_path: str) -> list[StoredDocument]:
        return [
            StoredDocument(
                id=document_id,
                data=copy.deepcopy(self._documents[f"{collection_path}/{document_id}"]),
            )
            for document_id in self._ids_in(collection_path)
        ]

    async def set(self, document_path: str, data: dict[str, Any]) -> None:
        _split(document_path)
        self._documents[document_path] = copy.deepcopy(data)
        self.writes.append(document_path)
