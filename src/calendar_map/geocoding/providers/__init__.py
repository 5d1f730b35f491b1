"""Geocoding providers."""

from calendar_map.geocoding.providers.base import GeocodeProvider
from calendar_map.geocoding.providers.google import GoogleGeocodeProvider

__all__ = [
    "GeocodeProvider",
    "GoogleGeocodeProvider",
]
