"""Book record operations, scoped to the signed-in user."""

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from booklib.errors import BackendUnavailable
from booklib.models import BookDraft, BookRecord, SessionContext
from booklib.utils.cancellation import CancelToken
from .store import Document, DocumentStore, DocumentStoreError

logger = logging.getLogger(__name__)

COLLECTION = "books"
OWNER_FIELD = "userId"


@dataclass
class BookRepository:
    """Maps the library operations onto document store calls.

    Reads are filtered by the session's user id. Writes carry the session's ID
    token so the store can enforce ownership; nothing here checks ownership or
    existence before a write is sent.
    """

    store: DocumentStore

    async def list_mine(
        self, session: SessionContext, cancel: Optional[CancelToken] = None
    ) -> list[BookRecord]:
        """Get every book owned by the session's user, in backend order."""
        try:
            documents = await self.store.query_by_field(
                COLLECTION,
                OWNER_FIELD,
                session.user_id,
                id_token=session.id_token,
                cancel=cancel,
            )
        except DocumentStoreError as e:
            raise BackendUnavailable(f"Failed to list books: {e}") from e

        books = []
        for document in documents:
            owner = document.fields.get(OWNER_FIELD)
            if owner != session.user_id:
                logger.warning(
                    f"Dropping {COLLECTION}/{document.id} owned by {owner!r} "
                    f"from results for {session.user_id}"
                )
                continue
            try:
                books.append(_document_to_book(document))
            except PydanticValidationError as e:
                logger.warning(f"Skipping malformed {COLLECTION}/{document.id}: {e}")
        return books

    async def add(
        self,
        session: SessionContext,
        draft: BookDraft,
        cancel: Optional[CancelToken] = None,
    ) -> None:
        """Store a new book for the session's user.

        The created record is not returned; callers re-list to see it.

        Raises:
            ValidationError: title or author is empty. No store call is made.
            BackendUnavailable: the store call failed.
        """
        draft.require_complete()
        fields = {
            "title": draft.title,
            "author": draft.author,
            "year": draft.year,
            OWNER_FIELD: session.user_id,
            "createdAt": datetime.now(timezone.utc),
        }
        try:
            document_id = await self.store.insert(
                COLLECTION, fields, id_token=session.id_token, cancel=cancel
            )
        except DocumentStoreError as e:
            raise BackendUnavailable(f"Failed to add book: {e}") from e
        logger.info(f"User {session.user_id} added book {document_id}")

    async def update(
        self,
        session: SessionContext,
        record_id: str,
        fields: BookDraft,
        cancel: Optional[CancelToken] = None,
    ) -> None:
        """Overwrite title, author and year of a book."""
        try:
            await self.store.update_fields(
                COLLECTION,
                record_id,
                {"title": fields.title, "author": fields.author, "year": fields.year},
                id_token=session.id_token,
                cancel=cancel,
            )
        except DocumentStoreError as e:
            raise BackendUnavailable(f"Failed to update book {record_id}: {e}") from e
        logger.info(f"User {session.user_id} updated book {record_id}")

    async def remove(
        self,
        session: SessionContext,
        record_id: str,
        cancel: Optional[CancelToken] = None,
    ) -> None:
        """Delete a book. There is no confirmation and no soft-delete."""
        try:
            await self.store.delete(
                COLLECTION, record_id, id_token=session.id_token, cancel=cancel
            )
        except DocumentStoreError as e:
            raise BackendUnavailable(f"Failed to delete book {record_id}: {e}") from e
        logger.info(f"User {session.user_id} deleted book {record_id}")


def _document_to_book(document: Document) -> BookRecord:
    """Convert a stored document to a BookRecord."""
    fields = document.fields
    year = fields.get("year")
    # Older documents stored the year as the raw form string.
    if isinstance(year, str):
        year = int(year) if year.strip().isdigit() else None
    return BookRecord(
        id=document.id,
        title=fields.get("title") or "",
        author=fields.get("author") or "",
        year=year,
        owner_id=fields[OWNER_FIELD],
        created_at=fields.get("createdAt") or document.create_time,
    )
