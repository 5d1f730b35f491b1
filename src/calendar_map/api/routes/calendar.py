"""Calendar routes.

- GET /api/calendar/events - the day's events that have a location
- GET /api/calendar/map - the same events with their resolved positions,
  ready to be drawn as pins next to a list view

Events whose location cannot be resolved are still returned (with
`position: null`) so the list view shows them; they just get no pin.
"""

from __future__ import annotations

import logging
from datetime import date as date_type
from datetime import tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from calendar_map.api.routes.geocode import GeoLocationResponse
from calendar_map.auth.dependencies import get_current_user
from calendar_map.auth.session import SessionUser
from calendar_map.calendar.google_calendar import CalendarEvent, GoogleCalendarClient
from calendar_map.config import get_settings
from calendar_map.geocoding.service import GeocodingService, get_geocoding_service
from calendar_map.models.location import Coordinates

logger = logging.getLogger(__name__)

router = APIRouter()


class CalendarEventResponse(BaseModel):
    """A calendar event as shown in the list view."""

    id: str
    summary: str
    location: str | None
    start: dict[str, str]
    end: dict[str, str]
    description: str | None
    htmlLink: str | None


class EventsResponse(BaseModel):
    """Events for one day."""

    date: date_type
    events: list[CalendarEventResponse]


class MapEventResponse(CalendarEventResponse):
    """An event plus where it is, if known."""

    position: GeoLocationResponse | None


class MapCenterResponse(BaseModel):
    lat: float
    lng: float


class MapResponse(BaseModel):
    """Events for one day with map pins."""

    date: date_type
    events: list[MapEventResponse]
    pinned: int
    unresolved: int
    center: MapCenterResponse | None


def get_calendar_client(
    user: SessionUser = Depends(get_current_user),
) -> GoogleCalendarClient:
    """Calendar client acting for the signed-in user."""
    settings = get_settings()
    return GoogleCalendarClient(
        access_token=user.access_token,
        refresh_token=user.refresh_token,
        client_id=settings.google_client_id,
        client_secret=settings.google_client_secret,
    )


def _parse_timezone(tz: str | None) -> tzinfo | None:
    if tz is None:
        return None
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown timezone: {tz}",
        )


async def _list_events(
    client: GoogleCalendarClient,
    day: date_type,
    tz: tzinfo | None,
) -> list[CalendarEvent]:
    settings = get_settings()
    try:
        return await run_in_threadpool(
            client.list_events_for_date,
            day,
            tz,
            settings.calendar_id,
            settings.calendar_max_results,
        )
    except Exception as e:
        logger.error(f"Calendar API error: {e.__class__.__name__}: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to fetch calendar events",
        )


@router.get("/events", response_model=EventsResponse)
async def list_events(
    date: date_type | None = Query(default=None, description="Day (YYYY-MM-DD), default today"),
    tz: str | None = Query(default=None, description="IANA timezone the day is in"),
    client: GoogleCalendarClient = Depends(get_calendar_client),
) -> EventsResponse:
    """List the day's events that have a location."""
    zone = _parse_timezone(tz)
    day = date or date_type.today()

    events = await _list_events(client, day, zone)

    return EventsResponse(
        date=day,
        events=[CalendarEventResponse(**e.to_response()) for e in events],
    )


@router.get("/map", response_model=MapResponse)
async def event_map(
    date: date_type | None = Query(default=None, description="Day (YYYY-MM-DD), default today"),
    tz: str | None = Query(default=None, description="IANA timezone the day is in"),
    client: GoogleCalendarClient = Depends(get_calendar_client),
    geocoder: GeocodingService = Depends(get_geocoding_service),
) -> MapResponse:
    """List the day's events with resolved positions for the map."""
    zone = _parse_timezone(tz)
    day = date or date_type.today()

    events = await _list_events(client, day, zone)
    locations = await geocoder.geocode_many(e.location for e in events)

    items = []
    for event, location in zip(events, locations):
        position = GeoLocationResponse.from_location(location) if location else None
        items.append(MapEventResponse(**event.to_response(), position=position))

    resolved = [loc.coordinates for loc in locations if loc is not None]
    center = Coordinates.centroid(resolved)

    return MapResponse(
        date=day,
        events=items,
        pinned=len(resolved),
        unresolved=len(events) - len(resolved),
        center=(
            MapCenterResponse(lat=center.latitude, lng=center.longitude)
            if center
            else None
        ),
    )
