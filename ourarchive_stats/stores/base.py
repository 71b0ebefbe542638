"""Document store contract used by the aggregator."""

from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True)
class StoredDocument:
    """A document read from a collection: its id and field data."""

    id: str
    data: dict[str, Any] = field(default_factory=dict)


class DocumentStore(Protocol):
    """Hierarchical key-document store.

    Paths are slash-separated: collection paths have an odd number of
    segments (``households/h1/items``), document paths an even number
    (``public_stats/ourarchive``).
    """

    async def count(self, collection_path: str) -> int:
        """Return the number of documents in a collection without fetching them.

        Stores without a server-side count must raise rather than scan.
        """
        ...

    async def list_documents(self, collection_path: str) -> list[StoredDocument]:
        """Return every document in a collection."""
        ...

    async def set(self, document_path: str, data: dict[str, Any]) -> None:
        """Create or fully replace the document at ``document_path``."""
        ...


def join_path(*segments: str) -> str:
    """Join path segments with ``/``."""
    return "/".join(segments)
