"""Tests for the Google Calendar client."""

from datetime import date, datetime, timezone
from unittest.mock import MagicMock
from zoneinfo import ZoneInfo

import pytest

from calendar_map.calendar.google_calendar import (
    CalendarEvent,
    GoogleCalendarClient,
    day_bounds,
)


def make_client(items: list[dict]) -> tuple[GoogleCalendarClient, MagicMock]:
    service = MagicMock()
    service.events.return_value.list.return_value.execute.return_value = {"items": items}
    return GoogleCalendarClient(access_token="ya29.test", service=service), service


@pytest.fixture
def api_items() -> list[dict]:
    return [
        {
            "id": "evt-1",
            "summary": "Design review",
            "location": "PD-2-301",
            "start": {"dateTime": "2026-10-18T09:00:00Z"},
            "end": {"dateTime": "2026-10-18T10:00:00Z"},
            "htmlLink": "https://calendar.google.com/event?eid=1",
        },
        {
            "id": "evt-2",
            "summary": "Focus time",
            "start": {"dateTime": "2026-10-18T11:00:00Z"},
            "end": {"dateTime": "2026-10-18T12:00:00Z"},
        },
        {
            "id": "evt-3",
            "summary": "Cancelled lunch",
            "status": "cancelled",
            "location": "10 Downing St",
            "start": {"dateTime": "2026-10-18T12:00:00Z"},
            "end": {"dateTime": "2026-10-18T13:00:00Z"},
        },
        {
            "id": "evt-4",
            "location": "   ",
            "start": {"dateTime": "2026-10-18T14:00:00Z"},
            "end": {"dateTime": "2026-10-18T15:00:00Z"},
        },
        {
            "id": "evt-5",
            "summary": "Offsite",
            "location": "Windsor Castle",
            "start": {"date": "2026-10-18"},
            "end": {"date": "2026-10-19"},
        },
    ]


class TestDayBounds:
    def test_utc_default(self):
        start, end = day_bounds(date(2026, 10, 18))

        assert start == datetime(2026, 10, 18, 0, 0, 0, tzinfo=timezone.utc)
        assert end == datetime(2026, 10, 18, 23, 59, 59, tzinfo=timezone.utc)

    def test_local_timezone(self):
        start, _ = day_bounds(date(2026, 7, 1), ZoneInfo("Europe/London"))

        assert start.isoformat() == "2026-07-01T00:00:00+01:00"


class TestListEventsForDate:
    def test_only_located_events_are_kept(self, api_items):
        client, _ = make_client(api_items)

        events = client.list_events_for_date(date(2026, 10, 18))

        assert [e.id for e in events] == ["evt-1", "evt-5"]

    def test_request_parameters(self):
        client, service = make_client([])

        client.list_events_for_date(date(2026, 10, 18), calendar_id="team", max_results=10)

        service.events.return_value.list.assert_called_once_with(
            calendarId="team",
            timeMin="2026-10-18T00:00:00+00:00",
            timeMax="2026-10-18T23:59:59+00:00",
            maxResults=10,
            singleEvents=True,
            orderBy="startTime",
        )

    def test_no_items(self):
        service = MagicMock()
        service.events.return_value.list.return_value.execute.return_value = {}
        client = GoogleCalendarClient(access_token="ya29.test", service=service)

        assert client.list_events_for_date(date(2026, 10, 18)) == []

    def test_api_errors_propagate(self):
        service = MagicMock()
        service.events.return_value.list.return_value.execute.side_effect = RuntimeError("403")
        client = GoogleCalendarClient(access_token="ya29.test", service=service)

        with pytest.raises(RuntimeError):
            client.list_events_for_date(date(2026, 10, 18))


class TestCalendarEvent:
    def test_timed_event(self, api_items):
        event = CalendarEvent.from_api(api_items[0], "primary")

        assert not event.is_all_day
        assert event.start == datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc)
        assert event.to_response() == {
            "id": "evt-1",
            "summary": "Design review",
            "location": "PD-2-301",
            "start": {"dateTime": "2026-10-18T09:00:00+00:00"},
            "end": {"dateTime": "2026-10-18T10:00:00+00:00"},
            "description": None,
            "htmlLink": "https://calendar.google.com/event?eid=1",
        }

    def test_all_day_event(self, api_items):
        event = CalendarEvent.from_api(api_items[4], "primary")

        assert event.is_all_day
        assert event.start is None
        assert event.to_response()["start"] == {"date": "2026-10-18"}
        assert event.to_response()["end"] == {"date": "2026-10-19"}

    def test_untitled_event(self, api_items):
        event = CalendarEvent.from_api(api_items[3], "primary")

        assert event.summary == "(No title)"
        assert not event.has_location
