"""Per-user library state and the refetch-after-mutation workflow.

The view-model owns the user's book list, the "new book" draft, the single
edit selection and the queue of transient notifications. Every successful
mutation is followed by `resync()`, a full unconditional re-list; local state
is never patched to mirror a remote change.
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
from typing import Literal, Optional

from booklib.db.books import BookRepository
from booklib.errors import BackendUnavailable, RequestCancelled, ValidationError
from booklib.models import BookDraft, BookRecord, SessionContext
from booklib.utils.cancellation import CancelToken
from . import constants

logger = logging.getLogger(__name__)

NotificationKind = Literal["success", "error"]


@dataclass(frozen=True)
class Notification:
    kind: NotificationKind
    message: str


class LibraryViewModel:
    def __init__(self, repository: BookRepository) -> None:
        self.repository = repository
        self.session: Optional[SessionContext] = None
        self.books: list[BookRecord] = []
        self.draft = BookDraft()
        self.editing: Optional[BookRecord] = None
        self.notifications: list[Notification] = []
        self._cancel = CancelToken()
        # Set when a mutation's resync already refreshed the list for the next render.
        self._fresh = False

    @property
    def closed(self) -> bool:
        return self._cancel.cancelled

    def notify(self, kind: NotificationKind, message: str) -> None:
        self.notifications.append(Notification(kind, message))

    def drain_notifications(self) -> list[Notification]:
        """Return pending notifications and clear them; each is shown once."""
        pending, self.notifications = self.notifications, []
        return pending

    def _require_session(self) -> SessionContext:
        if self.session is None:
            raise RequestCancelled("No active session")
        return self.session

    async def set_session(self, session: Optional[SessionContext]) -> None:
        """React to the session becoming available, changing, or going away."""
        if session is None:
            self.session = None
            self.books = []
            self.draft = BookDraft()
            self.editing = None
            self._fresh = False
            return

        previous = self.session
        self.session = session
        if previous is None or previous.user_id != session.user_id:
            self.books = []
            self.draft = BookDraft()
            self.editing = None
            await self.resync()
            self._fresh = True

    async def resync(self) -> bool:
        """Replace the book list wholesale with the backend's current view.

        Returns False, leaving the previous list in place, if the list could not
        be loaded.
        """
        session = self._require_session()
        try:
            books = await self.repository.list_mine(session, cancel=self._cancel)
        except BackendUnavailable as e:
            logger.error(f"Failed to load books for {session.user_id}: {e}")
            self.notify("error", constants.LIST_FAILURE)
            return False
        except RequestCancelled:
            logger.debug("Resync cancelled")
            return False
        self.books = books
        return True

    async def mount(self) -> None:
        """Bring the list up to date for a page render."""
        if self._fresh:
            self._fresh = False
            return
        await self.resync()

    async def _resync_after_mutation(self) -> None:
        if await self.resync():
            self._fresh = True

    async def submit_add(self, draft: BookDraft) -> bool:
        """Add the draft as a new book; the draft is kept if anything fails."""
        session = self._require_session()
        self.draft = draft
        try:
            await self.repository.add(session, draft, cancel=self._cancel)
        except ValidationError as e:
            logger.info(f"Rejected new book: {e}")
            self.notify("error", constants.MISSING_FIELDS)
            return False
        except BackendUnavailable as e:
            logger.error(f"Add failed for {session.user_id}: {e}")
            self.notify("error", constants.ADD_FAILURE)
            return False
        except RequestCancelled:
            return False

        self.draft = BookDraft()
        self.notify("success", constants.ADD_SUCCESS)
        await self._resync_after_mutation()
        return True

    def begin_edit(self, record_id: str) -> bool:
        """Select a book for editing, discarding any unsaved edit."""
        for book in self.books:
            if book.id == record_id:
                self.editing = book.model_copy(deep=True)
                return True
        logger.warning(f"Cannot edit unknown book {record_id}")
        return False

    def cancel_edit(self) -> None:
        self.editing = None

    async def submit_edit(self, fields: BookDraft) -> bool:
        """Save the edit selection with `fields`. A no-op when nothing is selected."""
        if self.editing is None:
            return False
        session = self._require_session()
        self.editing = self.editing.model_copy(update=fields.model_dump())
        try:
            fields.require_complete()
            await self.repository.update(
                session, self.editing.id, fields, cancel=self._cancel
            )
        except ValidationError as e:
            logger.info(f"Rejected edit of {self.editing.id}: {e}")
            self.notify("error", constants.MISSING_FIELDS)
            return False
        except BackendUnavailable as e:
            logger.error(f"Update failed for {session.user_id}: {e}")
            self.notify("error", constants.UPDATE_FAILURE)
            return False
        except RequestCancelled:
            return False

        self.editing = None
        self.notify("success", constants.UPDATE_SUCCESS)
        await self._resync_after_mutation()
        return True

    async def delete_record(self, record_id: str) -> bool:
        """Delete a book without confirmation, then resync."""
        session = self._require_session()
        try:
            await self.repository.remove(session, record_id, cancel=self._cancel)
        except BackendUnavailable as e:
            logger.error(f"Delete failed for {session.user_id}: {e}")
            self.notify("error", constants.DELETE_FAILURE)
            return False
        except RequestCancelled:
            return False

        if self.editing is not None and self.editing.id == record_id:
            self.editing = None
        self.notify("success", constants.DELETE_SUCCESS)
        await self._resync_after_mutation()
        return True

    def close(self) -> None:
        """Tear the view down, cancelling its in-flight requests."""
        self._cancel.cancel()


class ViewModelRegistry:
    """One library view-model per signed-in user."""

    def __init__(self, repository: BookRepository) -> None:
        self.repository = repository
        self._view_models: dict[str, LibraryViewModel] = {}

    async def attach(self, session: SessionContext) -> LibraryViewModel:
        """Get the user's view-model, creating it and loading its list if new.

        View-models whose session has expired are torn down first, so a user
        returning with a new token starts from an empty view.
        """
        await self._evict_expired()
        view_model = self._view_models.get(session.user_id)
        if view_model is None or view_model.closed:
            view_model = LibraryViewModel(self.repository)
            self._view_models[session.user_id] = view_model
        await view_model.set_session(session)
        return view_model

    async def discard(self, user_id: str) -> None:
        """Tear down a user's view-model when their session ends."""
        view_model = self._view_models.pop(user_id, None)
        if view_model is None:
            return
        view_model.close()
        await view_model.set_session(None)

    async def start(self, session: SessionContext) -> LibraryViewModel:
        """Attach a freshly signed-in session, dropping any view left by an earlier one."""
        await self.discard(session.user_id)
        return await self.attach(session)

    async def _evict_expired(self) -> None:
        expired = [
            user_id
            for user_id, view_model in self._view_models.items()
            if view_model.session is None or view_model.session.is_expired()
        ]
        for user_id in expired:
            logger.info(f"Session for {user_id} expired; discarding its library view")
            await self.discard(user_id)
