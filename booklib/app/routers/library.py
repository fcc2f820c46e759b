"""The library page and the form posts that drive it.

Every form post applies one view-model operation and redirects back to `/`,
which renders whatever state the operation left behind.
"""

import logging

from fastapi import APIRouter, Depends, Form, status
from fastapi.responses import HTMLResponse, RedirectResponse

from booklib.errors import ValidationError
from booklib.models import BookDraft, SessionContext, parse_year
from booklib.app import constants
from booklib.app.dependencies import view_models
from booklib.app.pages import render_library_page
from booklib.app.session import require_page_session
from booklib.app.view_model import LibraryViewModel, ViewModelRegistry

logger = logging.getLogger(__name__)

router = APIRouter(tags=["library"])


async def library_view(
    session: SessionContext = Depends(require_page_session),
    registry: ViewModelRegistry = Depends(view_models),
) -> LibraryViewModel:
    """The signed-in user's library view-model."""
    return await registry.attach(session)


def _back_to_library() -> RedirectResponse:
    return RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)


def _form_draft(
    view_model: LibraryViewModel, title: str, author: str, year: str
) -> BookDraft | None:
    """Build a draft from form input, notifying the user if the year is invalid."""
    try:
        return BookDraft(title=title, author=author, year=parse_year(year))
    except ValidationError as e:
        logger.info(f"Rejected form input: {e}")
        view_model.notify("error", constants.INVALID_YEAR)
        return None


@router.get("/", response_class=HTMLResponse)
async def library_page(
    view_model: LibraryViewModel = Depends(library_view),
) -> HTMLResponse:
    await view_model.mount()
    return HTMLResponse(render_library_page(view_model))


@router.post("/books")
async def add_book(
    title: str = Form(""),
    author: str = Form(""),
    year: str = Form(""),
    view_model: LibraryViewModel = Depends(library_view),
) -> RedirectResponse:
    draft = _form_draft(view_model, title, author, year)
    if draft is None:
        view_model.draft = BookDraft(title=title, author=author)
    else:
        await view_model.submit_add(draft)
    return _back_to_library()


@router.post("/books/edit/cancel")
def cancel_edit(
    view_model: LibraryViewModel = Depends(library_view),
) -> RedirectResponse:
    view_model.cancel_edit()
    return _back_to_library()


@router.post("/books/{book_id}/edit")
def begin_edit(
    book_id: str,
    view_model: LibraryViewModel = Depends(library_view),
) -> RedirectResponse:
    view_model.begin_edit(book_id)
    return _back_to_library()


@router.post("/books/{book_id}/delete")
async def delete_book(
    book_id: str,
    view_model: LibraryViewModel = Depends(library_view),
) -> RedirectResponse:
    await view_model.delete_record(book_id)
    return _back_to_library()


@router.post("/books/{book_id}")
async def save_book(
    book_id: str,
    title: str = Form(""),
    author: str = Form(""),
    year: str = Form(""),
    view_model: LibraryViewModel = Depends(library_view),
) -> RedirectResponse:
    """Save the book under edit."""
    if view_model.editing is None or view_model.editing.id != book_id:
        # A stale form for a selection that was cancelled or replaced, possibly
        # from another tab sharing this view.
        logger.warning(f"Ignoring save for {book_id}: not the book under edit")
        view_model.notify("error", constants.UPDATE_FAILURE)
        return _back_to_library()

    draft = _form_draft(view_model, title, author, year)
    if draft is not None:
        await view_model.submit_edit(draft)
    return _back_to_library()
