"""FastAPI application and routes.

## API Structure

- /auth - Authentication endpoints (Google OAuth)
- /api/calendar/events - The day's events that have a location
- /api/calendar/map - Those events with resolved map positions
- /api/geocode - Resolve a single address

## Authentication

Every /api endpoint requires the session cookie set during OAuth login.
"""

from calendar_map.api.app import create_app

__all__ = ["create_app"]
