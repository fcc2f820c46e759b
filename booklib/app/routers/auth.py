"""Login, signup and logout pages."""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Form, status
from fastapi.responses import HTMLResponse, RedirectResponse

from booklib.errors import AuthError
from booklib.integrations.firebase.auth import IdentityProviderClient
from booklib.models import SessionContext
from booklib.app import constants
from booklib.app.dependencies import identity_client, view_models
from booklib.app.env_loader import session_cookie_secure
from booklib.app.pages import render_login_page, render_signup_page
from booklib.app.session import optional_page_session
from booklib.app.view_model import Notification, ViewModelRegistry

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

# Outcomes that arrive at the login page by redirect.
LOGIN_PAGE_NOTICES = {
    "logged-out": Notification("success", constants.LOGOUT_SUCCESS),
}


def _start_session(session: SessionContext) -> RedirectResponse:
    """Redirect to the library with the session cookie set."""
    response = RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)
    max_age = None
    if session.expires_at is not None:
        remaining = session.expires_at - datetime.now(timezone.utc)
        max_age = max(int(remaining.total_seconds()), 0)
    response.set_cookie(
        constants.SESSION_COOKIE,
        session.id_token,
        max_age=max_age,
        httponly=True,
        secure=session_cookie_secure(),
        samesite="lax",
    )
    return response


@router.get("/login", response_class=HTMLResponse)
def login_page(notice: Optional[str] = None) -> HTMLResponse:
    notifications = [LOGIN_PAGE_NOTICES[notice]] if notice in LOGIN_PAGE_NOTICES else []
    return HTMLResponse(render_login_page(notifications))


@router.post("/login")
async def login(
    email: str = Form(...),
    password: str = Form(...),
    identity: IdentityProviderClient = Depends(identity_client),
    registry: ViewModelRegistry = Depends(view_models),
):
    """Sign in, then land on the library page.

    On failure the form is shown again with the email kept and one flat message.
    """
    try:
        session = await identity.login(email, password)
    except AuthError as e:
        logger.info(f"Login failed: {e}")
        return HTMLResponse(
            render_login_page(
                [Notification("error", constants.LOGIN_FAILURE)], email=email
            ),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    view_model = await registry.start(session)
    view_model.notify("success", constants.LOGIN_SUCCESS)
    return _start_session(session)


@router.get("/signup", response_class=HTMLResponse)
def signup_page() -> HTMLResponse:
    return HTMLResponse(render_signup_page())


@router.post("/signup")
async def signup(
    email: str = Form(...),
    password: str = Form(...),
    identity: IdentityProviderClient = Depends(identity_client),
    registry: ViewModelRegistry = Depends(view_models),
):
    """Create an account and sign in to it."""
    try:
        session = await identity.signup(email, password)
    except AuthError as e:
        logger.info(f"Signup failed: {e}")
        return HTMLResponse(
            render_signup_page(
                [Notification("error", constants.SIGNUP_FAILURE)], email=email
            ),
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    view_model = await registry.start(session)
    view_model.notify("success", constants.SIGNUP_SUCCESS)
    return _start_session(session)


@router.post("/logout")
async def logout(
    session: Optional[SessionContext] = Depends(optional_page_session),
    identity: IdentityProviderClient = Depends(identity_client),
    registry: ViewModelRegistry = Depends(view_models),
) -> RedirectResponse:
    """End the session, tear down the user's library view and go to the login page."""
    if session is not None:
        try:
            await identity.logout(session)
        except AuthError as e:
            logger.error(f"Logout failed for {session.user_id}: {e}")
            view_model = await registry.attach(session)
            view_model.notify("error", constants.LOGOUT_FAILURE)
            return RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)
        await registry.discard(session.user_id)

    response = RedirectResponse(
        "/login?notice=logged-out", status_code=status.HTTP_303_SEE_OTHER
    )
    response.delete_cookie(constants.SESSION_COOKIE)
    return response
