"""Geocoding resolution layer.

Turns the free-text location of a calendar entry into map coordinates.

## Components

- `normalize_address`: cache key for an address
- `StaticLocationMap`: prefix overrides for internal building/room codes
- `GeocodeCache`: remembers positive and negative outcomes per key
- `GoogleGeocodeProvider`: one Google Geocoding API call
- `GeocodingService`: runs the above in order; the only public entry point

## Usage

```python
from calendar_map.geocoding import get_geocoding_service

service = get_geocoding_service()
location = await service.geocode("262 High Holborn")
if location:
    print(location.to_response())
```
"""

from calendar_map.geocoding.cache import CacheLookup, CacheStatus, GeocodeCache
from calendar_map.geocoding.errors import (
    FailureKind,
    GeocodingError,
    MisconfiguredError,
    NotFoundError,
    ProviderStatusError,
    TransportError,
)
from calendar_map.geocoding.normalizer import normalize_address
from calendar_map.geocoding.providers import GeocodeProvider, GoogleGeocodeProvider
from calendar_map.geocoding.service import GeocodingService, get_geocoding_service
from calendar_map.geocoding.static_map import LocationMapping, StaticLocationMap

__all__ = [
    # Cache
    "CacheLookup",
    "CacheStatus",
    "GeocodeCache",
    # Errors
    "FailureKind",
    "GeocodingError",
    "MisconfiguredError",
    "NotFoundError",
    "ProviderStatusError",
    "TransportError",
    # Pipeline
    "normalize_address",
    "GeocodeProvider",
    "GoogleGeocodeProvider",
    "GeocodingService",
    "get_geocoding_service",
    "LocationMapping",
    "StaticLocationMap",
]
