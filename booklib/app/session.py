"""ID token validation and the session dependencies used by every route."""

import os
import time
import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any

import jwt
from jwt import PyJWKClient
from fastapi import Cookie, HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from booklib.models import SessionContext
from .constants import SESSION_COOKIE

logger = logging.getLogger(__name__)
bearer_scheme = HTTPBearer(auto_error=False)

# JWKS client cache
_jwks_client: Optional[PyJWKClient] = None
_jwks_cache_time: float = 0
JWKS_CACHE_DURATION = 3600  # 1 hour

DEFAULT_JWKS_URL = (
    "https://www.googleapis.com/service_accounts/v1/jwk/"
    "securetoken@system.gserviceaccount.com"
)


class LoginRequired(Exception):
    """Raised by the page guard when there is no valid session.

    The app turns this into a redirect to the login page.
    """


def get_jwks_url() -> str:
    return os.getenv("JWKS_URL", DEFAULT_JWKS_URL)


def get_jwt_issuer() -> str:
    """Expected token issuer; defaults to Firebase's per-project issuer."""
    issuer = os.getenv("JWT_ISSUER")
    if issuer:
        return issuer
    return f"https://securetoken.google.com/{os.environ['FIREBASE_PROJECT_ID']}"


def get_jwt_audience() -> str:
    """Expected token audience; defaults to the Firebase project id."""
    return os.getenv("JWT_AUDIENCE") or os.environ["FIREBASE_PROJECT_ID"]


def get_jwt_algorithms() -> list[str]:
    raw = os.getenv("JWT_ALGORITHMS", "RS256")
    return [alg.strip() for alg in raw.split(",") if alg.strip()]


def get_jwks_client() -> PyJWKClient:
    """Get or refresh JWKS client for JWT validation."""
    global _jwks_client, _jwks_cache_time

    current_time = time.time()
    if _jwks_client is None or (current_time - _jwks_cache_time) > JWKS_CACHE_DURATION:
        jwks_url = get_jwks_url()
        _jwks_client = PyJWKClient(
            jwks_url, cache_keys=True, lifespan=JWKS_CACHE_DURATION
        )
        _jwks_cache_time = current_time
        logger.info(f"Refreshed JWKS client from {jwks_url}")

    return _jwks_client


def validate_id_token(token: str) -> Optional[Dict[str, Any]]:
    """Validate an ID token locally using JWKS.

    Returns decoded claims if valid, None if invalid.
    """
    try:
        jwks_client = get_jwks_client()
        signing_key = jwks_client.get_signing_key_from_jwt(token)

        decoded = jwt.decode(
            token,
            signing_key.key,
            algorithms=get_jwt_algorithms(),
            issuer=get_jwt_issuer(),
            audience=get_jwt_audience(),
            options={"require": ["exp", "iss", "sub", "aud"]},
        )
        return decoded
    except jwt.ExpiredSignatureError:
        logger.info("ID token expired")
        return None
    except jwt.InvalidTokenError as e:
        logger.warning(f"Invalid ID token: {e}")
        return None
    except jwt.PyJWKClientError as e:
        logger.error(f"Could not fetch signing keys: {e}")
        return None


def session_from_token(token: str) -> Optional[SessionContext]:
    """Build a SessionContext from a token, or None if the token is not valid."""
    claims = validate_id_token(token)
    if not claims:
        return None

    sub = claims.get("sub")
    if not sub:
        logger.error(f"ID token missing sub claim: {claims}")
        return None

    return SessionContext(
        user_id=sub,
        id_token=token,
        email=claims.get("email"),
        expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
    )


async def optional_page_session(
    token: Optional[str] = Cookie(default=None, alias=SESSION_COOKIE),
) -> Optional[SessionContext]:
    """FastAPI dependency: the session carried by the page cookie, if any."""
    if not token:
        return None
    return session_from_token(token)


async def require_page_session(
    session: Optional[SessionContext] = Depends(optional_page_session),
) -> SessionContext:
    """FastAPI dependency guarding the library pages.

    Raises LoginRequired (a redirect to /login) when the cookie is missing,
    invalid or expired.
    """
    if session is None:
        raise LoginRequired()
    return session


async def require_api_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> SessionContext:
    """FastAPI dependency to verify the Bearer ID token on JSON routes.

    Returns the session if valid, raises 401 if missing or invalid.
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )

    session = session_from_token(credentials.credentials)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session
