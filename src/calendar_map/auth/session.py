"""Session management using signed JWT tokens.

There is no user database: everything a request needs to act for the user
lives in the session token, stored in an HTTP-only cookie.

## Security

- Tokens are signed with the application secret key
- Google tokens inside the JWT are Fernet encrypted (see `encryption`)
- Tokens expire after a configurable period (default: 7 days)
- Cookies are HTTP-only, Secure in production, SameSite=Lax

## Token Structure

```json
{
  "sub": "google-user-id",
  "email": "user@example.com",
  "name": "Ada Lovelace",
  "picture": "https://...",
  "gat": "<encrypted access token>",
  "grt": "<encrypted refresh token>",
  "iat": 1234567890,
  "exp": 1235172690,
  "type": "session"
}
```
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from calendar_map.auth.encryption import decrypt_token, encrypt_token
from calendar_map.config import get_settings

logger = logging.getLogger(__name__)

# JWT configuration
ALGORITHM = "HS256"
TOKEN_TYPE = "session"


@dataclass
class SessionUser:
    """The signed-in user's identity and Google credentials."""

    user_id: str
    email: str
    name: str | None
    picture: str | None
    access_token: str
    refresh_token: str | None = None


@dataclass
class SessionData:
    """Data decoded from a session token."""

    user: SessionUser
    created_at: datetime
    expires_at: datetime

    @property
    def is_expired(self) -> bool:
        """Check if the session has expired."""
        return datetime.now(timezone.utc) > self.expires_at


def create_session_token(
    user: SessionUser,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed session token for a user.

    Args:
        user: Identity and Google tokens to carry
        expires_delta: Custom expiration time (or use default from settings)

    Returns:
        Signed JWT token string
    """
    settings = get_settings()

    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(seconds=settings.session_max_age_seconds)

    expires_at = now + expires_delta

    payload = {
        "sub": user.user_id,
        "email": user.email,
        "name": user.name,
        "picture": user.picture,
        "gat": encrypt_token(user.access_token),
        "grt": encrypt_token(user.refresh_token),
        "iat": int(now.timestamp()),
        "exp": int(expires_at.timestamp()),
        "type": TOKEN_TYPE,
    }

    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def verify_session_token(token: str) -> SessionData | None:
    """Verify and decode a session token.

    Args:
        token: The JWT token string

    Returns:
        SessionData if valid, None if invalid, expired, or undecryptable
    """
    settings = get_settings()

    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[ALGORITHM],
        )
    except JWTError as e:
        logger.debug(f"Session token verification failed: {e}")
        return None

    if payload.get("type") != TOKEN_TYPE:
        logger.debug("Invalid token type")
        return None

    try:
        user = SessionUser(
            user_id=str(payload["sub"]),
            email=payload["email"],
            name=payload.get("name"),
            picture=payload.get("picture"),
            access_token=decrypt_token(payload["gat"]),
            refresh_token=decrypt_token(payload.get("grt")) or None,
        )
        created_at = datetime.fromtimestamp(payload["iat"], tz=timezone.utc)
        expires_at = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
    except (KeyError, ValueError) as e:
        logger.debug(f"Invalid token payload: {e}")
        return None

    if not user.access_token:
        logger.debug("Session has no Google access token")
        return None

    session = SessionData(user=user, created_at=created_at, expires_at=expires_at)

    # jose checks exp too; this also covers clock skew in tests
    if session.is_expired:
        logger.debug("Session token expired")
        return None

    return session
