"""Google sign-in and the cookie session that carries the user's tokens.

The calendar routes only need `get_current_user`; everything else here
exists to produce the session cookie it reads.
"""

from calendar_map.auth.dependencies import (
    get_current_user,
    get_current_user_optional,
)
from calendar_map.auth.google import (
    GoogleGrant,
    GoogleIdentity,
    GoogleOAuth,
    GoogleOAuthError,
    get_google_oauth,
)
from calendar_map.auth.session import (
    SessionData,
    SessionUser,
    create_session_token,
    verify_session_token,
)

__all__ = [
    "GoogleGrant",
    "GoogleIdentity",
    "GoogleOAuth",
    "GoogleOAuthError",
    "get_google_oauth",
    "SessionData",
    "SessionUser",
    "create_session_token",
    "verify_session_token",
    "get_current_user",
    "get_current_user_optional",
]
