"""Geocoding route.

POST /api/geocode resolves one address for the signed-in user. The browser
calls it once per calendar event that it wants to pin on the map.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from calendar_map.auth.dependencies import get_current_user
from calendar_map.auth.session import SessionUser
from calendar_map.geocoding.service import GeocodingService, get_geocoding_service
from calendar_map.models.location import GeoLocation

router = APIRouter()


class GeocodeRequest(BaseModel):
    """Geocode request body."""

    address: str | None = None


class GeoLocationResponse(BaseModel):
    """A resolved location."""

    model_config = ConfigDict(populate_by_name=True)

    lat: float
    lng: float
    formatted_address: str = Field(alias="formattedAddress")

    @classmethod
    def from_location(cls, location: GeoLocation) -> GeoLocationResponse:
        return cls.model_validate(location.to_response())


@router.post(
    "/geocode",
    response_model=GeoLocationResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"description": "Address is required"},
        status.HTTP_404_NOT_FOUND: {"description": "Location not found"},
    },
)
async def geocode_address(
    data: GeocodeRequest,
    user: SessionUser = Depends(get_current_user),
    geocoder: GeocodingService = Depends(get_geocoding_service),
) -> GeoLocationResponse | JSONResponse:
    """Resolve an address to coordinates."""
    if not data.address or not data.address.strip():
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Address is required"},
        )

    location = await geocoder.geocode(data.address)
    if location is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": "Location not found"},
        )

    return GeoLocationResponse.from_location(location)
