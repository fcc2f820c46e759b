"""Load booklib's settings before any other app module reads them.

With ENV=dev the Firebase settings come from .env.dev, which points at the
in-memory document store. Staging and prod get their Firebase project and API
key from the hosting platform, so nothing is read from disk there.
"""

import os
import sys
from typing import Literal
from dotenv import load_dotenv

EnvironmentName = Literal["dev", "staging", "prod"]

# The Firebase project the app signs users into and stores books in.
REQUIRED_ENV_VARS = [
    "FIREBASE_API_KEY",
    "FIREBASE_PROJECT_ID",
]


def validate_required_env_vars() -> None:
    """Exit with a message naming any missing Firebase setting."""
    missing = [var for var in REQUIRED_ENV_VARS if not os.getenv(var)]
    if missing:
        print(
            f"ERROR: Missing required environment variables: {', '.join(missing)}",
            file=sys.stderr,
        )
        print(
            "Set them in .env.dev for local runs, or in the platform's environment.",
            file=sys.stderr,
        )
        sys.exit(1)


# Runs on import; app.py imports this module first.
env = os.getenv("ENV", "dev")
if env in ("staging", "prod"):
    print(f"booklib starting in {env}; Firebase settings come from the platform")
elif env == "dev":
    print("booklib starting in dev; reading settings from .env.dev")
    load_dotenv(".env.dev", verbose=True)
else:
    raise ValueError(f"Invalid ENV value: {env}. Must be 'dev', 'staging', or 'prod'.")

validate_required_env_vars()


def get_current_environment() -> EnvironmentName:
    """Get the current environment (dev, staging, or prod)."""
    env = os.getenv("ENV", "dev")
    if env in ("dev", "staging", "prod"):
        return env  # type: ignore[return-value]
    raise ValueError(f"Invalid ENV value: {env}. Must be 'dev', 'staging', or 'prod'.")


def session_cookie_secure() -> bool:
    """Whether the session cookie is marked Secure (HTTPS only).

    Defaults to on everywhere except dev, where the app is served over plain HTTP.
    """
    raw = os.getenv("SESSION_COOKIE_SECURE")
    if raw is None:
        return get_current_environment() != "dev"
    return raw.lower() in ("1", "true", "yes")
