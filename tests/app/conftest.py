from datetime import datetime, timedelta, timezone
from typing import Iterator
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from booklib.app.app import app
from booklib.app.constants import SESSION_COOKIE
from booklib.app.dependencies import document_store, identity_client, view_models
from booklib.app.view_model import ViewModelRegistry
from booklib.db.books import BookRepository
from booklib.db.memory import MemoryDocumentStore

# Tokens accepted by the mocked validator, keyed to the user they sign in.
TEST_TOKENS = {
    "u1-token": "u1",
    "u2-token": "u2",
}


def _mock_validate(token: str):
    user_id = TEST_TOKENS.get(token)
    if user_id is None:
        return None
    return {
        "sub": user_id,
        "email": f"{user_id}@example.com",
        "exp": int((datetime.now(timezone.utc) + timedelta(hours=1)).timestamp()),
    }


@pytest.fixture
def store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.fixture
def registry(store: MemoryDocumentStore) -> ViewModelRegistry:
    return ViewModelRegistry(BookRepository(store=store))


@pytest.fixture
def identity() -> MagicMock:
    mock_identity = MagicMock()
    mock_identity.login = AsyncMock()
    mock_identity.signup = AsyncMock()
    mock_identity.logout = AsyncMock()
    return mock_identity


@pytest.fixture
def client(
    store: MemoryDocumentStore,
    registry: ViewModelRegistry,
    identity: MagicMock,
    monkeypatch,
) -> Iterator[TestClient]:
    """Test client backed by a fresh memory store and a mocked identity provider.

    Token validation is mocked so that the tokens in TEST_TOKENS are valid.
    """
    monkeypatch.setattr("booklib.app.session.validate_id_token", _mock_validate)
    app.dependency_overrides[document_store] = lambda: store
    app.dependency_overrides[view_models] = lambda: registry
    app.dependency_overrides[identity_client] = lambda: identity
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def user_client(client: TestClient) -> TestClient:
    """Test client signed in as user u1 through the session cookie."""
    client.cookies.set(SESSION_COOKIE, "u1-token")
    return client


@pytest.fixture
def api_client(client: TestClient) -> TestClient:
    """Test client sending user u1's ID token as a Bearer credential."""
    client.headers["Authorization"] = "Bearer u1-token"
    return client
