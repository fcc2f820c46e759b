"""JSON API over the book repository, authenticated with a Bearer ID token."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from booklib.db.books import BookRepository
from booklib.errors import BackendUnavailable, ValidationError
from booklib.models import BookDraft, BookRecord, SessionContext
from booklib.app.dependencies import book_repository
from booklib.app.session import require_api_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/books", tags=["books"])


def _unavailable(e: BackendUnavailable) -> HTTPException:
    logger.error(str(e))
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Document store unavailable",
    )


@router.get("", response_model=list[BookRecord])
async def list_books(
    session: SessionContext = Depends(require_api_session),
    repository: BookRepository = Depends(book_repository),
) -> list[BookRecord]:
    """Get the caller's books, in the order the store returns them."""
    try:
        return await repository.list_mine(session)
    except BackendUnavailable as e:
        raise _unavailable(e)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_book(
    draft: BookDraft,
    session: SessionContext = Depends(require_api_session),
    repository: BookRepository = Depends(book_repository),
) -> dict[str, str]:
    """Add a book. The new record is not returned; list again to see it."""
    try:
        await repository.add(session, draft)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except BackendUnavailable as e:
        raise _unavailable(e)
    return {"status": "created"}


@router.put("/{book_id}")
async def update_book(
    book_id: str,
    fields: BookDraft,
    session: SessionContext = Depends(require_api_session),
    repository: BookRepository = Depends(book_repository),
) -> dict[str, str]:
    """Overwrite a book's title, author and year."""
    try:
        fields.require_complete()
        await repository.update(session, book_id, fields)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except BackendUnavailable as e:
        raise _unavailable(e)
    return {"status": "updated"}


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_book(
    book_id: str,
    session: SessionContext = Depends(require_api_session),
    repository: BookRepository = Depends(book_repository),
) -> Response:
    try:
        await repository.remove(session, book_id)
    except BackendUnavailable as e:
        raise _unavailable(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
