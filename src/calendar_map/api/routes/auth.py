"""Sign-in routes.

- GET /auth/login - start Google sign-in
- GET /auth/google/callback - finish it and set the session cookie
- POST /auth/logout - drop the session cookie
- GET /auth/me - who is signed in, for the page header

The OAuth `state` value is kept in a short-lived HTTP-only cookie and must
come back unchanged on the callback, so any worker can finish a sign-in
another worker started.
"""

from __future__ import annotations

import logging
import secrets

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from calendar_map.auth.dependencies import get_current_user_optional
from calendar_map.auth.google import GoogleOAuth, GoogleOAuthError, get_google_oauth
from calendar_map.auth.session import SessionUser, create_session_token
from calendar_map.config import get_settings

logger = logging.getLogger(__name__)

router = APIRouter()

STATE_COOKIE = "calendar_map_oauth_state"
STATE_MAX_AGE_SECONDS = 600


class ProfileResponse(BaseModel):
    id: str
    email: str
    name: str | None
    picture_url: str | None


class MeResponse(BaseModel):
    authenticated: bool
    user: ProfileResponse | None = None


def _cookie_flags() -> dict:
    return {
        "httponly": True,
        "secure": get_settings().is_production,
        "samesite": "lax",
    }


@router.get("/login")
async def login(oauth: GoogleOAuth = Depends(get_google_oauth)) -> RedirectResponse:
    """Send the browser to Google's consent screen."""
    if not oauth.is_configured:
        raise HTTPException(
            status_code=status.HTTP_501_NOT_IMPLEMENTED,
            detail="Google sign-in is not configured",
        )

    state = secrets.token_urlsafe(32)
    redirect = RedirectResponse(url=oauth.authorization_url(state))
    redirect.set_cookie(STATE_COOKIE, state, max_age=STATE_MAX_AGE_SECONDS, **_cookie_flags())
    return redirect


@router.get("/google/callback")
async def google_callback(
    request: Request,
    code: str,
    state: str,
    oauth: GoogleOAuth = Depends(get_google_oauth),
) -> RedirectResponse:
    """Trade the code for tokens and start a session."""
    expected = request.cookies.get(STATE_COOKIE)
    if not expected or not secrets.compare_digest(expected, state):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Sign-in expired or was not started here",
        )

    try:
        grant = await oauth.exchange_code(code)
        identity = await oauth.fetch_identity(grant.access_token)
    except GoogleOAuthError as e:
        logger.error(f"Google sign-in failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Google sign-in failed",
        )

    settings = get_settings()
    token = create_session_token(
        SessionUser(
            user_id=identity.id,
            email=identity.email,
            name=identity.name,
            picture=identity.picture,
            access_token=grant.access_token,
            refresh_token=grant.refresh_token,
        )
    )

    redirect = RedirectResponse(
        url=settings.post_login_redirect, status_code=status.HTTP_302_FOUND
    )
    redirect.delete_cookie(STATE_COOKIE, **_cookie_flags())
    redirect.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=settings.session_max_age_seconds,
        **_cookie_flags(),
    )
    logger.info(f"{identity.email} signed in")
    return redirect


@router.post("/logout")
async def logout(
    response: Response,
    user: SessionUser | None = Depends(get_current_user_optional),
) -> dict:
    if user:
        logger.info(f"{user.email} signed out")
    response.delete_cookie(get_settings().session_cookie_name, **_cookie_flags())
    return {"status": "logged_out"}


@router.get("/me", response_model=MeResponse)
async def me(user: SessionUser | None = Depends(get_current_user_optional)) -> MeResponse:
    if user is None:
        return MeResponse(authenticated=False)
    return MeResponse(
        authenticated=True,
        user=ProfileResponse(
            id=user.user_id,
            email=user.email,
            name=user.name,
            picture_url=user.picture,
        ),
    )
