"""Google Calendar API client.

Lists the signed-in user's events for one day, keeping only the events that
carry a location (the ones that can become map pins).

## API Documentation

https://developers.google.com/calendar/api/v3/reference/events/list

## Authentication

Uses the OAuth 2.0 access token obtained during login. When a refresh token
and the OAuth client credentials are available, google-auth refreshes an
expired access token transparently.

## Rate Limits

Google Calendar API has quotas:
- 1,000,000 queries per day (default)
- 500 queries per 100 seconds per user
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timezone, tzinfo
from typing import Any

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"


def day_bounds(day: date, tz: tzinfo | None = None) -> tuple[datetime, datetime]:
    """First and last second of a calendar day in the given timezone."""
    tz = tz or timezone.utc
    start = datetime.combine(day, time(0, 0, 0), tzinfo=tz)
    end = datetime.combine(day, time(23, 59, 59), tzinfo=tz)
    return start, end


@dataclass
class CalendarEvent:
    """A calendar event."""

    id: str
    calendar_id: str
    summary: str
    description: str | None = None
    location: str | None = None
    start: datetime | None = None
    end: datetime | None = None
    start_date: str | None = None  # For all-day events (YYYY-MM-DD)
    end_date: str | None = None
    is_all_day: bool = False
    status: str = "confirmed"  # confirmed, tentative, cancelled
    html_link: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any], calendar_id: str) -> CalendarEvent:
        """Create from Google Calendar API response."""
        start_data = data.get("start", {})
        end_data = data.get("end", {})

        is_all_day = "date" in start_data

        start = None
        end = None
        start_date = None
        end_date = None

        if is_all_day:
            start_date = start_data.get("date")
            end_date = end_data.get("date")
        else:
            start_str = start_data.get("dateTime")
            end_str = end_data.get("dateTime")
            if start_str:
                start = datetime.fromisoformat(start_str.replace("Z", "+00:00"))
            if end_str:
                end = datetime.fromisoformat(end_str.replace("Z", "+00:00"))

        return cls(
            id=data["id"],
            calendar_id=calendar_id,
            summary=data.get("summary", "(No title)"),
            description=data.get("description"),
            location=data.get("location"),
            start=start,
            end=end,
            start_date=start_date,
            end_date=end_date,
            is_all_day=is_all_day,
            status=data.get("status", "confirmed"),
            html_link=data.get("htmlLink"),
        )

    @property
    def has_location(self) -> bool:
        return bool(self.location and self.location.strip())

    def _time_dict(self, moment: datetime | None, day: str | None) -> dict[str, str]:
        if moment is not None:
            return {"dateTime": moment.isoformat()}
        if day is not None:
            return {"date": day}
        return {}

    def to_response(self) -> dict[str, Any]:
        """Wire format used by the HTTP API."""
        return {
            "id": self.id,
            "summary": self.summary,
            "location": self.location,
            "start": self._time_dict(self.start, self.start_date),
            "end": self._time_dict(self.end, self.end_date),
            "description": self.description,
            "htmlLink": self.html_link,
        }


class GoogleCalendarClient:
    """Client for Google Calendar API.

    Example:
        ```python
        client = GoogleCalendarClient(access_token, refresh_token)
        events = client.list_events_for_date(date.today())
        ```
    """

    def __init__(
        self,
        access_token: str,
        refresh_token: str | None = None,
        client_id: str | None = None,
        client_secret: str | None = None,
        service: Any | None = None,
    ):
        """Initialize the client.

        Args:
            access_token: OAuth access token
            refresh_token: OAuth refresh token for auto-refresh
            client_id: OAuth client ID (needed for refresh)
            client_secret: OAuth client secret (needed for refresh)
            service: Prebuilt Calendar API resource (tests)
        """
        self.access_token = access_token

        if service is None:
            credentials = Credentials(
                token=access_token,
                refresh_token=refresh_token,
                token_uri=GOOGLE_TOKEN_URI,
                client_id=client_id,
                client_secret=client_secret,
            )
            service = build(
                "calendar", "v3", credentials=credentials, cache_discovery=False
            )

        self._service = service

    def list_events_for_date(
        self,
        day: date,
        tz: tzinfo | None = None,
        calendar_id: str = "primary",
        max_results: int = 50,
    ) -> list[CalendarEvent]:
        """List the day's events that have a location.

        Recurring events are expanded into single instances and ordered by
        start time. Cancelled events are skipped.

        Args:
            day: The calendar day
            tz: Timezone the day is interpreted in (default UTC)
            calendar_id: Calendar ID ('primary' for the user's main calendar)
            max_results: Maximum events to fetch

        Returns:
            Events with a non-empty location, in start-time order
        """
        time_min, time_max = day_bounds(day, tz)

        result = (
            self._service.events()
            .list(
                calendarId=calendar_id,
                timeMin=time_min.isoformat(),
                timeMax=time_max.isoformat(),
                maxResults=max_results,
                singleEvents=True,  # Expand recurring events
                orderBy="startTime",
            )
            .execute()
        )

        events = []
        for item in result.get("items", []):
            if item.get("status") == "cancelled":
                continue
            event = CalendarEvent.from_api(item, calendar_id)
            if event.has_location:
                events.append(event)

        logger.debug(
            f"Calendar {calendar_id}: {len(events)} events with location on {day}"
        )
        return events
