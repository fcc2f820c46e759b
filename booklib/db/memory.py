"""In-process document store for local development and tests."""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from booklib.utils.cancellation import CancelToken
from .store import Document, DocumentStoreError

logger = logging.getLogger(__name__)


class MemoryDocumentStore:
    """Keeps documents in a dict of collections, in insertion order.

    Behaves like the remote store at the boundary: ids are assigned on insert,
    updating a missing document fails, and deleting a missing document is a no-op.
    """

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, Document]] = {}

    def _collection(self, name: str) -> dict[str, Document]:
        return self._collections.setdefault(name, {})

    async def insert(
        self,
        collection: str,
        fields: dict[str, Any],
        *,
        id_token: str | None = None,
        cancel: CancelToken | None = None,
    ) -> str:
        if cancel is not None:
            cancel.raise_if_cancelled()
        document_id = uuid4().hex
        self._collection(collection)[document_id] = Document(
            id=document_id,
            fields=dict(fields),
            create_time=datetime.now(timezone.utc),
        )
        logger.debug(f"Inserted {collection}/{document_id}")
        return document_id

    async def query_by_field(
        self,
        collection: str,
        field_path: str,
        value: Any,
        *,
        id_token: str | None = None,
        cancel: CancelToken | None = None,
    ) -> list[Document]:
        if cancel is not None:
            cancel.raise_if_cancelled()
        return [
            Document(id=doc.id, fields=dict(doc.fields), create_time=doc.create_time)
            for doc in self._collection(collection).values()
            if doc.fields.get(field_path) == value
        ]

    async def update_fields(
        self,
        collection: str,
        document_id: str,
        fields: dict[str, Any],
        *,
        id_token: str | None = None,
        cancel: CancelToken | None = None,
    ) -> None:
        if cancel is not None:
            cancel.raise_if_cancelled()
        document = self._collection(collection).get(document_id)
        if document is None:
            raise DocumentStoreError(
                f"No document {collection}/{document_id}", status_code=404
            )
        document.fields.update(fields)

    async def delete(
        self,
        collection: str,
        document_id: str,
        *,
        id_token: str | None = None,
        cancel: CancelToken | None = None,
    ) -> None:
        if cancel is not None:
            cancel.raise_if_cancelled()
        self._collection(collection).pop(document_id, None)
