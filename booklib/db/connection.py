import os
from typing import Optional

from .store import DocumentStore
from .memory import MemoryDocumentStore

_document_store: Optional[DocumentStore] = None


def get_document_store_kind() -> str:
    """Which document store backs the app: 'firestore' (default) or 'memory'."""
    kind = os.getenv("DOCUMENT_STORE", "firestore").lower()
    if kind not in ("firestore", "memory"):
        raise ValueError(
            f"Invalid DOCUMENT_STORE value: {kind}. Must be 'firestore' or 'memory'."
        )
    return kind


def get_document_store() -> DocumentStore:
    """Get the process-wide document store, creating it on first use.

    The memory store only lives as long as the process, so it must be shared.
    """
    global _document_store

    if _document_store is None:
        if get_document_store_kind() == "memory":
            _document_store = MemoryDocumentStore()
        else:
            # Imported here so the memory backend needs no Firebase settings.
            from booklib.integrations.firebase.firestore import (
                FirestoreClient,
                DEFAULT_BASE_URL,
            )

            _document_store = FirestoreClient(
                project_id=os.environ["FIREBASE_PROJECT_ID"],
                base_url=os.getenv("FIRESTORE_URL", DEFAULT_BASE_URL),
            )
    return _document_store
