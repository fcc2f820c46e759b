import os

import httpx
import pytest

# Settings must be in place before the env loader validates them on import.
os.environ.setdefault("ENV", "dev")
os.environ.setdefault("FIREBASE_API_KEY", "test-api-key")
os.environ.setdefault("FIREBASE_PROJECT_ID", "booklib-test")
os.environ.setdefault("DOCUMENT_STORE", "memory")
os.environ.setdefault("SESSION_COOKIE_SECURE", "false")

from booklib.app import env_loader  # noqa: E402, F401

from ._factories import BookRecordFactory, SessionFactory  # noqa: E402


class AccidentalNetworkAccessError(Exception):
    """Raised when a unit test accidentally tries to reach a real service."""

    pass


def _raise_network_access_error(*args, **kwargs):
    """Raise an error when a real HTTP request is attempted in unit tests."""
    raise AccidentalNetworkAccessError(
        "Unit test attempted to reach the network! "
        "Either mock the client (e.g. patch('httpx.AsyncClient')) or use the "
        "memory document store, or mark this test as @pytest.mark.integration."
    )


@pytest.fixture(autouse=True)
def prevent_network_access_in_unit_tests(request, monkeypatch):
    """Prevent accidental network access in unit tests.

    Applies to every test not marked `integration`. Only the real httpx
    transports are patched, so TestClient and mocked clients keep working.
    """
    markers = [marker.name for marker in request.node.iter_markers()]
    if "integration" in markers:
        yield
        return

    monkeypatch.setattr(
        httpx.AsyncHTTPTransport, "handle_async_request", _raise_network_access_error
    )
    monkeypatch.setattr(httpx.HTTPTransport, "handle_request", _raise_network_access_error)
    yield


@pytest.fixture(scope="session")
def book_factory() -> BookRecordFactory:
    return BookRecordFactory()


@pytest.fixture(scope="session")
def session_factory() -> SessionFactory:
    return SessionFactory()
