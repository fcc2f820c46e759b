"""Tests for the Firebase identity provider client."""

import json
from unittest.mock import patch, AsyncMock, Mock

import httpx
import pytest

from booklib.errors import AuthError
from booklib.integrations.firebase.auth import IdentityProviderClient
from booklib.models import SessionContext


def _response(status_code: int, payload: dict) -> Mock:
    response = Mock()
    response.status_code = status_code
    response.content = json.dumps(payload).encode()
    response.json.return_value = payload
    response.text = json.dumps(payload)
    return response


SIGN_IN_PAYLOAD = {
    "idToken": "id-token-123",
    "refreshToken": "refresh-123",
    "expiresIn": "3600",
    "localId": "u1",
    "email": "reader@example.com",
}


@pytest.fixture
def identity() -> IdentityProviderClient:
    return IdentityProviderClient(api_key="test-api-key")


@pytest.mark.asyncio
async def test_login_success(identity: IdentityProviderClient):
    """Test that a successful sign-in yields a session for that user."""
    with patch("httpx.AsyncClient") as mock_client:
        mock_client_instance = AsyncMock()
        mock_client.return_value.__aenter__.return_value = mock_client_instance
        mock_client_instance.post.return_value = _response(200, SIGN_IN_PAYLOAD)

        session = await identity.login("reader@example.com", "hunter22")

    assert isinstance(session, SessionContext)
    assert session.user_id == "u1"
    assert session.id_token == "id-token-123"
    assert session.email == "reader@example.com"
    assert session.expires_at is not None
    assert not session.is_expired()

    call_args = mock_client_instance.post.call_args
    assert call_args[0][0] == (
        "https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword"
    )
    assert call_args[1]["params"] == {"key": "test-api-key"}
    assert call_args[1]["json"] == {
        "email": "reader@example.com",
        "password": "hunter22",
        "returnSecureToken": True,
    }


@pytest.mark.asyncio
async def test_signup_uses_signup_endpoint(identity: IdentityProviderClient):
    """Test that signup posts to accounts:signUp."""
    with patch("httpx.AsyncClient") as mock_client:
        mock_client_instance = AsyncMock()
        mock_client.return_value.__aenter__.return_value = mock_client_instance
        mock_client_instance.post.return_value = _response(200, SIGN_IN_PAYLOAD)

        session = await identity.signup("reader@example.com", "hunter22")

    assert session.user_id == "u1"
    assert mock_client_instance.post.call_args[0][0].endswith("/accounts:signUp")


@pytest.mark.asyncio
async def test_login_rejected(identity: IdentityProviderClient):
    """Test that bad credentials raise AuthError."""
    with patch("httpx.AsyncClient") as mock_client:
        mock_client_instance = AsyncMock()
        mock_client.return_value.__aenter__.return_value = mock_client_instance
        mock_client_instance.post.return_value = _response(
            400, {"error": {"code": 400, "message": "INVALID_LOGIN_CREDENTIALS"}}
        )

        with pytest.raises(AuthError):
            await identity.login("reader@example.com", "wrong")


@pytest.mark.asyncio
async def test_signup_conflict(identity: IdentityProviderClient):
    """Test that an existing email raises AuthError."""
    with patch("httpx.AsyncClient") as mock_client:
        mock_client_instance = AsyncMock()
        mock_client.return_value.__aenter__.return_value = mock_client_instance
        mock_client_instance.post.return_value = _response(
            400, {"error": {"code": 400, "message": "EMAIL_EXISTS"}}
        )

        with pytest.raises(AuthError):
            await identity.signup("reader@example.com", "hunter22")


@pytest.mark.asyncio
async def test_login_unreachable(identity: IdentityProviderClient):
    """Test that a transport error raises AuthError."""
    with patch("httpx.AsyncClient") as mock_client:
        mock_client_instance = AsyncMock()
        mock_client.return_value.__aenter__.return_value = mock_client_instance
        mock_client_instance.post.side_effect = httpx.ConnectError("refused")

        with pytest.raises(AuthError):
            await identity.login("reader@example.com", "hunter22")


@pytest.mark.asyncio
async def test_login_unexpected_body(identity: IdentityProviderClient):
    """Test that a 200 without a token raises AuthError."""
    with patch("httpx.AsyncClient") as mock_client:
        mock_client_instance = AsyncMock()
        mock_client.return_value.__aenter__.return_value = mock_client_instance
        mock_client_instance.post.return_value = _response(200, {"kind": "nothing"})

        with pytest.raises(AuthError):
            await identity.login("reader@example.com", "hunter22")


@pytest.mark.asyncio
async def test_custom_base_url():
    """Test that the base URL can point at an emulator."""
    identity = IdentityProviderClient(
        api_key="k", base_url="http://localhost:9099/identitytoolkit.googleapis.com/v1/"
    )
    with patch("httpx.AsyncClient") as mock_client:
        mock_client_instance = AsyncMock()
        mock_client.return_value.__aenter__.return_value = mock_client_instance
        mock_client_instance.post.return_value = _response(200, SIGN_IN_PAYLOAD)

        await identity.login("reader@example.com", "hunter22")

    assert mock_client_instance.post.call_args[0][0] == (
        "http://localhost:9099/identitytoolkit.googleapis.com/v1/"
        "accounts:signInWithPassword"
    )
