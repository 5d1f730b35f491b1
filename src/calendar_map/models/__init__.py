"""Domain models for calendar map."""

from calendar_map.models.location import Coordinates, GeoLocation

__all__ = [
    "Coordinates",
    "GeoLocation",
]
