"""Document store implementations."""

from ourarchive_stats.stores.base import DocumentStore, StoredDocument, join_path
from ourarchive_stats.stores.firestore import FirestoreDocumentStore
from ourarchive_stats.stores.memory import InMemoryDocumentStore

__all__ = [
    "DocumentStore",
    "StoredDocument",
    "join_path",
    "FirestoreDocumentStore",
    "InMemoryDocumentStore",
]
