"""FastAPI dependencies that read the session cookie."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status

from calendar_map.auth.session import SessionUser, verify_session_token
from calendar_map.config import get_settings


async def get_current_user_optional(request: Request) -> SessionUser | None:
    """The signed-in user, or None for a missing or unusable cookie."""
    token = request.cookies.get(get_settings().session_cookie_name)
    if not token:
        return None

    session = verify_session_token(token)
    return session.user if session else None


async def get_current_user(
    user: SessionUser | None = Depends(get_current_user_optional),
) -> SessionUser:
    """Like `get_current_user_optional`, but 401 when nobody is signed in."""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return user
