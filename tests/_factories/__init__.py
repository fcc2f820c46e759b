from .book import BookRecordFactory, SessionFactory

__all__ = [
    "BookRecordFactory",
    "SessionFactory",
]
