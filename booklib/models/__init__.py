from .book import BookDraft, BookRecord, parse_year
from .session import SessionContext

__all__ = [
    "BookDraft",
    "BookRecord",
    "parse_year",
    "SessionContext",
]
