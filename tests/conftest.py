"""Pytest fixtures for calendar map tests.

This module provides test fixtures that ensure:
1. No external API calls are made (Google Geocoding, Calendar, OAuth)
2. Isolated test environment with controlled configuration
3. Fresh singletons (settings, geocoding service, cipher) for every test
"""

import asyncio
import os

import pytest

# Set test environment BEFORE importing application modules
os.environ.setdefault("SECRET_KEY", "test-secret-key-at-least-32-characters-long")
os.environ.setdefault("GOOGLE_MAPS_API_KEY", "test-maps-key")
os.environ.setdefault("GOOGLE_CLIENT_ID", "test-client-id")
os.environ.setdefault("GOOGLE_CLIENT_SECRET", "test-client-secret")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

from calendar_map.geocoding.errors import NotFoundError
from calendar_map.geocoding.providers.base import GeocodeProvider
from calendar_map.geocoding.static_map import LocationMapping, StaticLocationMap
from calendar_map.models.location import GeoLocation


# =============================================================================
# Test Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset cached singletons before and after each test."""
    from calendar_map.auth.encryption import reset_cipher
    from calendar_map.auth.google import get_google_oauth
    from calendar_map.config import get_settings
    from calendar_map.geocoding.service import get_geocoding_service

    def _reset():
        get_settings.cache_clear()
        get_geocoding_service.cache_clear()
        get_google_oauth.cache_clear()
        reset_cipher()

    _reset()
    yield
    _reset()


# =============================================================================
# Geocoding doubles
# =============================================================================


class FakeProvider(GeocodeProvider):
    """In-memory provider that records every call.

    `outcomes` maps a raw address to a GeoLocation, an exception to raise,
    or a list of those consumed one per call. Unknown addresses raise
    NotFoundError.
    """

    name = "fake"
    base_url = "http://geocoder.invalid/json"

    def __init__(self, outcomes=None, delay: float = 0.0):
        super().__init__()
        self.outcomes = dict(outcomes or {})
        self.delay = delay
        self.calls: list[str] = []

    async def resolve(self, address):
        self.calls.append(address)
        await asyncio.sleep(self.delay)

        outcome = self.outcomes.get(address)
        if isinstance(outcome, list):
            outcome = outcome.pop(0)
        if outcome is None:
            raise NotFoundError(f"No results for '{address}'", provider=self.name)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def _translate_response(self, response_data, address):
        raise NotImplementedError


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def make_provider():
    """Factory for FakeProvider instances."""
    return FakeProvider


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def high_holborn() -> GeoLocation:
    """262 High Holborn, London."""
    return GeoLocation(
        latitude=51.5179,
        longitude=-0.1162,
        formatted_address="262 High Holborn, London WC1V 7EE, UK",
    )


@pytest.fixture
def downing_street() -> GeoLocation:
    return GeoLocation(
        latitude=51.5034,
        longitude=-0.1276,
        formatted_address="10 Downing St, London SW1A 2AA, UK",
    )


@pytest.fixture
def static_map(high_holborn: GeoLocation) -> StaticLocationMap:
    """Static map with the PD-2- building code."""
    return StaticLocationMap([LocationMapping("PD-2-", high_holborn)])


@pytest.fixture
def google_ok_payload() -> dict:
    """Google Geocoding API success body with two candidates."""
    return {
        "status": "OK",
        "results": [
            {
                "formatted_address": "262 High Holborn, London WC1V 7EE, UK",
                "geometry": {"location": {"lat": 51.5179, "lng": -0.1162}},
            },
            {
                "formatted_address": "High Holborn, London, UK",
                "geometry": {"location": {"lat": 51.5176, "lng": -0.1190}},
            },
        ],
    }
