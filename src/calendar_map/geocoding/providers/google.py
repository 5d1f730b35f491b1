"""Google Geocoding API provider.

## API Documentation Summary
Source: https://developers.google.com/maps/documentation/geocoding/requests-geocoding

## Endpoint
- URL: https://maps.googleapis.com/maps/api/geocode/json
- Query: address=<free text>&key=<api key>

## Response Format
```json
{
  "status": "OK",
  "results": [
    {
      "formatted_address": "262 High Holborn, London WC1V 7EE, UK",
      "geometry": {"location": {"lat": 51.5179, "lng": -0.1162}}
    }
  ]
}
```

## Status Translation
| status | Outcome |
|--------|---------|
| OK (results non-empty) | first result |
| OK (results empty) | NotFoundError |
| ZERO_RESULTS | NotFoundError |
| OVER_QUERY_LIMIT, OVER_DAILY_LIMIT | ProviderStatusError |
| REQUEST_DENIED, INVALID_REQUEST | ProviderStatusError |
| UNKNOWN_ERROR, anything else | ProviderStatusError |

Results are ranked by Google; the first one is always taken.
"""

from __future__ import annotations

import logging
from typing import Any

from calendar_map.geocoding.errors import NotFoundError, ProviderStatusError
from calendar_map.geocoding.providers.base import GeocodeProvider
from calendar_map.models.location import GeoLocation

logger = logging.getLogger(__name__)

STATUS_OK = "OK"
NOT_FOUND_STATUSES = frozenset({"ZERO_RESULTS"})


class GoogleGeocodeProvider(GeocodeProvider):
    """Google Maps Geocoding API provider.

    Example:
        ```python
        async with GoogleGeocodeProvider(api_key="...") as provider:
            location = await provider.resolve("262 High Holborn")
        ```
    """

    name = "google"
    base_url = "https://maps.googleapis.com/maps/api/geocode/json"
    requires_api_key = True

    async def resolve(self, address: str) -> GeoLocation:
        """Geocode an address with Google.

        Raises:
            TransportError: Network failure, timeout, or non-2xx response
            NotFoundError: ZERO_RESULTS or an empty result list
            ProviderStatusError: Any other status, or a malformed body
        """
        response = await self._fetch(
            self.base_url,
            params={"address": address, "key": self.api_key},
        )

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderStatusError(
                f"Failed to parse response: {e}",
                provider=self.name,
            ) from e

        return self._translate_response(data, address)

    def _translate_response(
        self,
        response_data: Any,
        address: str,
    ) -> GeoLocation:
        """Translate a Google response body; see module docstring."""
        if not isinstance(response_data, dict):
            raise ProviderStatusError(
                "Unexpected response body: not a JSON object",
                provider=self.name,
            )

        status = response_data.get("status")
        results = response_data.get("results") or []
        if not isinstance(results, list):
            raise ProviderStatusError(
                f"Unexpected results field: {type(results).__name__}",
                provider=self.name,
                status=status,
            )

        if status in NOT_FOUND_STATUSES or (status == STATUS_OK and not results):
            raise NotFoundError(
                f"No results for '{address}'",
                provider=self.name,
                status=status,
            )

        if status != STATUS_OK:
            message = response_data.get("error_message") or f"status {status}"
            raise ProviderStatusError(
                f"Geocoding failed: {message}",
                provider=self.name,
                status=str(status),
            )

        first = results[0]
        try:
            location = first["geometry"]["location"]
            return GeoLocation(
                latitude=location["lat"],
                longitude=location["lng"],
                formatted_address=first["formatted_address"],
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ProviderStatusError(
                f"Unexpected result shape: {e}",
                provider=self.name,
                status=status,
            ) from e
