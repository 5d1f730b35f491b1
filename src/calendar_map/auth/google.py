"""Google sign-in for the map.

Calendar Map needs exactly three things from Google's OAuth endpoints:

- a consent URL asking for read-only calendar access (plus the basic
  profile, so the session can show who is signed in)
- an authorization-code exchange that yields an access token, and a
  refresh token on first consent (`access_type=offline`)
- the signed-in user's profile

Token refresh is left to google-auth inside the calendar client; nothing
here stores or refreshes tokens.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any
from urllib.parse import urlencode

import httpx

from calendar_map.config import get_settings

logger = logging.getLogger(__name__)

AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"


class GoogleOAuthError(Exception):
    """Google rejected or failed a sign-in step."""


@dataclass(frozen=True)
class GoogleGrant:
    """Tokens handed back by the code exchange."""

    access_token: str
    refresh_token: str | None = None


@dataclass(frozen=True)
class GoogleIdentity:
    """Who signed in."""

    id: str
    email: str
    name: str | None = None
    picture: str | None = None


class GoogleOAuth:
    """Authorization-code flow against Google.

    Example:
        ```python
        oauth = get_google_oauth()
        url = oauth.authorization_url(state)
        # ...Google redirects back with ?code=...
        grant = await oauth.exchange_code(code)
        identity = await oauth.fetch_identity(grant.access_token)
        ```
    """

    def __init__(
        self,
        client_id: str | None,
        client_secret: str | None,
        redirect_uri: str,
        scopes: list[str],
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.scopes = scopes
        self.timeout = timeout
        self._client = client

    @classmethod
    def from_settings(cls) -> GoogleOAuth:
        settings = get_settings()
        if not (settings.google_client_id and settings.google_client_secret):
            logger.warning("Google sign-in disabled: GOOGLE_CLIENT_ID/SECRET not set")
        return cls(
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret,
            redirect_uri=settings.google_redirect_uri,
            scopes=settings.google_scopes,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def authorization_url(self, state: str) -> str:
        """Consent screen URL; `state` comes back untouched on the callback."""
        query = urlencode(
            {
                "client_id": self.client_id,
                "redirect_uri": self.redirect_uri,
                "response_type": "code",
                "scope": " ".join(self.scopes),
                "state": state,
                # a refresh token is only issued with offline access on consent
                "access_type": "offline",
                "prompt": "consent",
            }
        )
        return f"{AUTHORIZE_URL}?{query}"

    async def exchange_code(self, code: str) -> GoogleGrant:
        data = await self._call(
            "POST",
            TOKEN_URL,
            data={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "code": code,
                "grant_type": "authorization_code",
                "redirect_uri": self.redirect_uri,
            },
        )
        if not data.get("access_token"):
            raise GoogleOAuthError("Token response has no access_token")
        return GoogleGrant(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
        )

    async def fetch_identity(self, access_token: str) -> GoogleIdentity:
        data = await self._call(
            "GET",
            USERINFO_URL,
            headers={"Authorization": f"Bearer {access_token}"},
        )
        try:
            return GoogleIdentity(
                id=str(data["id"]),
                email=data["email"],
                name=data.get("name"),
                picture=data.get("picture"),
            )
        except KeyError as e:
            raise GoogleOAuthError(f"Profile response is missing {e}") from e

    async def _call(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        """One request to Google; any failure becomes GoogleOAuthError."""
        try:
            if self._client is not None:
                response = await self._client.request(method, url, **kwargs)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise GoogleOAuthError(f"{url} unreachable: {e.__class__.__name__}") from e

        if response.status_code != 200:
            # body holds Google's error code (e.g. invalid_grant), never a token
            logger.warning(f"{url} returned {response.status_code}: {response.text}")
            raise GoogleOAuthError(f"{url} returned {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise GoogleOAuthError(f"{url} returned a non-JSON body") from e
        if not isinstance(data, dict):
            raise GoogleOAuthError(f"{url} returned an unexpected body")
        return data


@lru_cache
def get_google_oauth() -> GoogleOAuth:
    return GoogleOAuth.from_settings()
