# This file loads env variables and must thus be imported before anything else.
from . import env_loader  # noqa: F401
from .env_loader import get_current_environment

import os
import logging

from fastapi import FastAPI, Depends, Request, status
from fastapi.responses import RedirectResponse

from booklib.models import SessionContext
from .routers import auth_router, library_router, books_router
from .models import EnvironmentResponse
from .session import LoginRequired, require_api_session

"""FastAPI application setup for the book library.

Serves the login, signup and library pages, the JSON book API, and the health
and environment endpoints. This module configures logging and the redirect to
the login page for requests without a valid session.
"""

logger = logging.getLogger(__name__)

app = FastAPI(title="booklib")
app.include_router(auth_router)
app.include_router(library_router)
app.include_router(books_router)


# Configure basic logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s - %(filename)s:%(lineno)d",
    datefmt="%Y-%m-%d %H:%M:%S",
)
# Configure the logging for the app itself if the user specifies it.
if "LOG_LEVEL" in os.environ:
    match os.environ["LOG_LEVEL"].upper():
        case "DEBUG":
            log_level = logging.DEBUG
        case "INFO":
            log_level = logging.INFO
        case "WARNING":
            log_level = logging.WARNING
        case "ERROR":
            log_level = logging.ERROR
        case "CRITICAL":
            log_level = logging.CRITICAL
        case _:
            raise ValueError(f"Invalid log level: {os.environ['LOG_LEVEL']}")
    logging.getLogger("booklib").setLevel(log_level)


@app.exception_handler(LoginRequired)
async def redirect_to_login(request: Request, exc: LoginRequired) -> RedirectResponse:
    """Send requests without a valid session to the login page."""
    logger.debug(f"No valid session for {request.url.path}, redirecting to /login")
    return RedirectResponse("/login", status_code=status.HTTP_303_SEE_OTHER)


@app.get("/health")
def health_check() -> dict[str, str]:
    """Health check endpoint that returns 200 status."""
    return {"status": "healthy"}


@app.get("/environment", response_model=EnvironmentResponse)
def get_environment(
    _session: SessionContext = Depends(require_api_session),
) -> EnvironmentResponse:
    """Get the current environment configuration."""
    environment = get_current_environment()
    return EnvironmentResponse(environment=environment)
