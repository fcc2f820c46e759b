"""The document store boundary used by the book repository."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

from booklib.utils.cancellation import CancelToken


class DocumentStoreError(Exception):
    """A document store call failed (transport error or non-success status)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class Document:
    """A stored document: its id plus a flat, untyped field set."""

    id: str
    fields: dict[str, Any] = field(default_factory=dict)
    create_time: datetime | None = None


class DocumentStore(Protocol):
    """A remote, schemaless per-record store.

    `id_token` is the caller's identity token, forwarded so the backend can
    apply its own access rules. Every call may be aborted through `cancel`.
    """

    async def insert(
        self,
        collection: str,
        fields: dict[str, Any],
        *,
        id_token: str | None = None,
        cancel: CancelToken | None = None,
    ) -> str: ...

    async def query_by_field(
        self,
        collection: str,
        field_path: str,
        value: Any,
        *,
        id_token: str | None = None,
        cancel: CancelToken | None = None,
    ) -> list[Document]: ...

    async def update_fields(
        self,
        collection: str,
        document_id: str,
        fields: dict[str, Any],
        *,
        id_token: str | None = None,
        cancel: CancelToken | None = None,
    ) -> None: ...

    async def delete(
        self,
        collection: str,
        document_id: str,
        *,
        id_token: str | None = None,
        cancel: CancelToken | None = None,
    ) -> None: ...
