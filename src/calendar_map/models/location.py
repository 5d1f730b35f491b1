"""Location models for calendar map pins."""

from __future__ import annotations

from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field


class Coordinates(BaseModel):
    """Geographic coordinates (latitude/longitude).

    Latitude:
        - Negative (-) = south of equator
        - Positive (+) = north of equator
        - Range: -90 to +90

    Longitude:
        - Negative (-) = west of prime meridian
        - Positive (+) = east of prime meridian
        - Range: -180 to +180
    """

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90, description="Latitude in decimal degrees")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude in decimal degrees")

    @classmethod
    def centroid(cls, points: list[Coordinates]) -> Self | None:
        """Arithmetic mean of a list of points, or None for an empty list.

        Good enough for centring a map on a single day's events; it does not
        handle sets that straddle the antimeridian.
        """
        if not points:
            return None
        return cls(
            latitude=sum(p.latitude for p in points) / len(points),
            longitude=sum(p.longitude for p in points) / len(points),
        )


class GeoLocation(BaseModel):
    """A resolved address: where it is and how the resolver spelled it.

    Instances are frozen, so one object can be handed to any number of
    callers (and kept in the geocode cache) without copying.
    """

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    formatted_address: str

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(latitude=self.latitude, longitude=self.longitude)

    def to_response(self) -> dict[str, Any]:
        """Wire format used by the HTTP API and the CLI."""
        return {
            "lat": self.latitude,
            "lng": self.longitude,
            "formattedAddress": self.formatted_address,
        }
