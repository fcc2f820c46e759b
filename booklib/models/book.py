"""Book records and drafts."""

from __future__ import annotations
from datetime import datetime

from pydantic import BaseModel

from booklib.errors import ValidationError


class BookDraft(BaseModel):
    """The user-editable fields of a book.

    Used both for the "new book" form and as the full-field payload of an update.
    """

    title: str = ""
    author: str = ""
    year: int | None = None

    def missing_fields(self) -> list[str]:
        """Names of required fields that are empty or whitespace-only."""
        return [name for name in ("title", "author") if not getattr(self, name).strip()]

    def require_complete(self) -> None:
        """Raise ValidationError if title or author is empty."""
        missing = self.missing_fields()
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")


class BookRecord(BookDraft):
    """A stored book, owned by exactly one user."""

    id: str
    owner_id: str
    created_at: datetime | None = None


def parse_year(raw: str | None) -> int | None:
    """Parse the publication year form field. Blank means no year."""
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw.strip())
    except ValueError:
        raise ValidationError(f"Publication year must be a whole number: {raw!r}")
