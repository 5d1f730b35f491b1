"""Application configuration.

Configuration is loaded from environment variables using pydantic-settings.
All sensitive values (secrets, API keys) should be provided via environment
variables, not config files.

## Required Environment Variables

- SECRET_KEY: Application secret for session signing and token encryption
- GOOGLE_MAPS_API_KEY: Google Geocoding API key (the app refuses to start
  geocoding without it)

## Optional Environment Variables

- GOOGLE_CLIENT_ID: Google OAuth client ID
- GOOGLE_CLIENT_SECRET: Google OAuth client secret
- ENCRYPTION_SALT: Salt for token encryption (default: derived from SECRET_KEY)
- LOCATION_MAPPINGS: JSON list of static address-prefix overrides
- GEOCODE_TIMEOUT_SECONDS, GEOCODE_CONCURRENCY,
  GEOCODE_TRANSPORT_FAILURE_TTL_SECONDS, GEOCODE_TRANSPORT_RETRIES
- DEBUG: Enable debug mode (default: false)

## Example .env file

```
SECRET_KEY=your-secret-key-at-least-32-characters
GOOGLE_MAPS_API_KEY=your-maps-api-key
GOOGLE_CLIENT_ID=your-google-client-id.apps.googleusercontent.com
GOOGLE_CLIENT_SECRET=your-google-client-secret
LOCATION_MAPPINGS=[{"prefix": "PD-2-", "latitude": 51.5179, "longitude": -0.1162, "formatted_address": "262 High Holborn, London WC1V 7EE, UK"}]
```
"""

from __future__ import annotations

import hashlib
import secrets
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LocationMappingConfig(BaseModel):
    """A static address-prefix override as written in configuration."""

    prefix: str = Field(..., min_length=1)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    formatted_address: str


# PD-2- rooms are all at High Holborn
DEFAULT_LOCATION_MAPPINGS: list[LocationMappingConfig] = [
    LocationMappingConfig(
        prefix="PD-2-",
        latitude=51.5179,
        longitude=-0.1162,
        formatted_address="262 High Holborn, London WC1V 7EE, UK",
    ),
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Calendar Map"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"

    # Security
    secret_key: str = Field(
        ...,
        min_length=32,
        description="Secret key for signing and encryption (min 32 chars)",
    )
    encryption_salt: str = Field(
        default="",
        description="Salt for token encryption (auto-generated if not provided)",
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    allowed_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8000"],
        description="CORS allowed origins",
    )

    # Google OAuth
    google_client_id: str | None = None
    google_client_secret: str | None = None
    google_redirect_uri: str = "http://localhost:8000/auth/google/callback"
    post_login_redirect: str = "/"
    google_scopes: list[str] = Field(
        default=[
            "openid",
            "email",
            "profile",
            "https://www.googleapis.com/auth/calendar.readonly",
        ],
        description="Google OAuth scopes",
    )

    # Google Calendar API
    calendar_id: str = "primary"
    calendar_max_results: int = Field(default=50, ge=1, le=2500)

    # Geocoding
    google_maps_api_key: str | None = None
    geocode_url: str = "https://maps.googleapis.com/maps/api/geocode/json"
    geocode_timeout_seconds: float = Field(default=10.0, gt=0)
    geocode_concurrency: int = Field(default=4, ge=1, le=32)
    geocode_transport_failure_ttl_seconds: float = Field(
        default=300.0,
        ge=0,
        description="How long a network/timeout failure is remembered (0 = not cached)",
    )
    geocode_transport_retries: int = Field(default=0, ge=0, le=5)
    location_mappings: list[LocationMappingConfig] = Field(
        default_factory=lambda: list(DEFAULT_LOCATION_MAPPINGS),
        description="Ordered address-prefix overrides; first match wins",
    )

    # Session
    session_cookie_name: str = "calendar_map_session"
    session_max_age_seconds: int = 60 * 60 * 24 * 7  # 7 days

    @field_validator("encryption_salt", mode="before")
    @classmethod
    def generate_encryption_salt(cls, v: str, info) -> str:
        """Generate encryption salt from secret_key if not provided."""
        if v:
            return v
        secret_key = info.data.get("secret_key", "")
        if secret_key:
            return hashlib.sha256(f"{secret_key}-salt".encode()).hexdigest()[:32]
        return secrets.token_hex(16)

    @field_validator("google_maps_api_key", mode="before")
    @classmethod
    def blank_api_key_is_missing(cls, v: str | None) -> str | None:
        """Treat an empty or whitespace-only key as not configured."""
        if v is None or not str(v).strip():
            return None
        return str(v).strip()

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are loaded once and cached. To reload, clear the cache:
    ```python
    get_settings.cache_clear()
    ```
    """
    return Settings()
