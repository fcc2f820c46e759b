import asyncio
from datetime import datetime, timezone

from booklib.db.memory import MemoryDocumentStore


def seed_book(
    store: MemoryDocumentStore,
    owner_id: str,
    title: str,
    author: str,
    year: int | None = None,
) -> str:
    """Insert a book document directly into the memory store; returns its id."""
    return asyncio.run(
        store.insert(
            "books",
            {
                "title": title,
                "author": author,
                "year": year,
                "userId": owner_id,
                "createdAt": datetime.now(timezone.utc),
            },
        )
    )


def stored_books(store: MemoryDocumentStore, owner_id: str) -> list[dict]:
    documents = asyncio.run(store.query_by_field("books", "userId", owner_id))
    return [document.fields for document in documents]
