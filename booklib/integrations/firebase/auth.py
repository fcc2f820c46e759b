"""Firebase Identity Toolkit client: email/password accounts."""

from dataclasses import dataclass
import logging
from typing import Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from booklib.errors import AuthError
from booklib.models.session import SessionContext
from booklib.utils.cancellation import CancelToken, guarded
from .models import FirebaseAuthResponse

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://identitytoolkit.googleapis.com/v1"
REQUEST_TIMEOUT = 10


@dataclass
class IdentityProviderClient:
    """Client for Firebase email/password authentication.

    Every failure is flattened into AuthError; the provider's error code is only
    logged, never shown to the user.
    """

    api_key: str
    base_url: str = DEFAULT_BASE_URL

    async def _authenticate(
        self,
        endpoint: str,
        email: str,
        password: str,
        cancel: Optional[CancelToken],
    ) -> SessionContext:
        url = f"{self.base_url.rstrip('/')}/accounts:{endpoint}"
        async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as client:
            try:
                response = await guarded(
                    client.post(
                        url,
                        params={"key": self.api_key},
                        json={
                            "email": email,
                            "password": password,
                            "returnSecureToken": True,
                        },
                    ),
                    cancel,
                )
            except httpx.HTTPError as e:
                logger.error(
                    f"Identity provider request to {endpoint} failed: "
                    f"exception_type={type(e).__name__}, error={e}"
                )
                raise AuthError("Identity provider unreachable") from e

        if response.status_code != 200:
            logger.warning(
                f"Identity provider rejected {endpoint}: "
                f"{response.status_code} {_error_code(response)}"
            )
            raise AuthError(f"{endpoint} failed (status {response.status_code})")

        try:
            token = FirebaseAuthResponse.model_validate_json(response.content)
        except PydanticValidationError as e:
            logger.error(f"Unexpected {endpoint} response: {e}")
            raise AuthError(f"{endpoint} returned an unexpected response") from e

        return SessionContext(
            user_id=token.local_id,
            id_token=token.id_token,
            email=token.email or email,
            expires_at=token.expires_at_datetime(),
        )

    async def login(
        self, email: str, password: str, cancel: Optional[CancelToken] = None
    ) -> SessionContext:
        """Sign in with email and password."""
        session = await self._authenticate("signInWithPassword", email, password, cancel)
        logger.info(f"User {session.user_id} logged in")
        return session

    async def signup(
        self, email: str, password: str, cancel: Optional[CancelToken] = None
    ) -> SessionContext:
        """Create an account and sign in to it."""
        session = await self._authenticate("signUp", email, password, cancel)
        logger.info(f"Created account for user {session.user_id}")
        return session

    async def logout(self, session: SessionContext) -> None:
        """End a session.

        Firebase ID tokens are stateless, so there is nothing to revoke remotely;
        the caller drops the token and tears down the user's view.
        """
        logger.info(f"User {session.user_id} logged out")


def _error_code(response: httpx.Response) -> str:
    """Pull the provider's error code (e.g. EMAIL_EXISTS) out of an error body."""
    try:
        return response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return response.text
