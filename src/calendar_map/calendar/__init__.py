"""Calendar integration module.

Reads the signed-in user's Google Calendar for one day and hands the
events that have a location to the geocoding layer.

## Google Calendar API

Uses the Google Calendar API v3:
- https://developers.google.com/calendar/api/v3/reference
"""

from calendar_map.calendar.google_calendar import (
    CalendarEvent,
    GoogleCalendarClient,
    day_bounds,
)

__all__ = [
    "CalendarEvent",
    "GoogleCalendarClient",
    "day_bounds",
]
