import logging
import os
from typing import Optional

from fastapi import Depends

from booklib.db.books import BookRepository
from booklib.db.connection import get_document_store
from booklib.db.store import DocumentStore
from booklib.integrations.firebase.auth import IdentityProviderClient, DEFAULT_BASE_URL
from .view_model import ViewModelRegistry

logger = logging.getLogger(__name__)

_view_models: Optional[ViewModelRegistry] = None


def document_store() -> DocumentStore:
    return get_document_store()


def book_repository(store: DocumentStore = Depends(document_store)) -> BookRepository:
    return BookRepository(store=store)


def identity_client() -> IdentityProviderClient:
    return IdentityProviderClient(
        api_key=os.environ["FIREBASE_API_KEY"],
        base_url=os.getenv("IDENTITY_PROVIDER_URL", DEFAULT_BASE_URL),
    )


def view_models() -> ViewModelRegistry:
    """Get the process-wide registry of per-user library views."""
    global _view_models

    if _view_models is None:
        _view_models = ViewModelRegistry(BookRepository(store=get_document_store()))
        logger.debug("Created library view registry")
    return _view_models
