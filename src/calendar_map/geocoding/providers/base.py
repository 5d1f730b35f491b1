"""Base geocoding provider abstraction.

A provider wraps exactly one external geocoding API call: it builds the
request, interprets the provider's own status codes, and translates a
successful response into a `GeoLocation`.

## Contract

- `resolve(address)` returns a `GeoLocation` or raises a `GeocodingError`
  subclass (see `calendar_map.geocoding.errors`)
- one outbound request per call, bounded by `timeout`; no retries here
  (retry policy belongs to `GeocodingService`)
- providers that need a credential refuse to be constructed without one

## Supported Providers

### Google Geocoding API
- Endpoint: https://maps.googleapis.com/maps/api/geocode/json
- Auth: `key` query parameter
- Key response path: status, results[].geometry.location, results[].formatted_address
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from calendar_map.geocoding.errors import MisconfiguredError, TransportError
from calendar_map.models.location import GeoLocation

logger = logging.getLogger(__name__)


class GeocodeProvider(ABC):
    """Abstract base class for geocoding providers.

    Attributes:
        name: Short provider identifier used in logs and errors
        base_url: Endpoint URL
        requires_api_key: Whether construction fails without an API key

    Example:
        ```python
        class MyProvider(GeocodeProvider):
            name = "my_provider"
            base_url = "https://geocode.example.com/search"

            async def resolve(self, address):
                response = await self._fetch(self.base_url, params={"q": address})
                return self._translate_response(response.json(), address)
        ```
    """

    name: str
    base_url: str
    requires_api_key: bool = False

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float = 10.0,
        user_agent: str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize the provider.

        Args:
            api_key: API key if required by the provider
            base_url: Override the endpoint (tests, proxies)
            timeout: Request timeout in seconds
            user_agent: User-Agent string for requests
            client: Shared HTTP client; one is created lazily if omitted

        Raises:
            MisconfiguredError: If the provider needs a key and none was given
        """
        if self.requires_api_key and not api_key:
            raise MisconfiguredError(
                f"{self.name} geocoding requires an API key",
                provider=self.name,
            )

        self.api_key = api_key
        if base_url:
            self.base_url = base_url
        self.timeout = timeout
        self.user_agent = user_agent or "calendar-map/0.1.0"
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> GeocodeProvider:
        """Enter async context manager."""
        self._get_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context manager."""
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self._client

    def _get_default_headers(self) -> dict[str, str]:
        """Get default headers for requests."""
        return {
            "User-Agent": self.user_agent,
            "Accept": "application/json",
        }

    async def _fetch(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Issue a single GET request.

        Args:
            url: Full URL to fetch
            params: Query parameters
            headers: Additional headers

        Returns:
            A 2xx HTTP response

        Raises:
            TransportError: On timeout, network failure, or non-2xx status
        """
        client = self._get_client()
        request_headers = self._get_default_headers()
        if headers:
            request_headers.update(headers)

        try:
            response = await client.get(
                url, params=params, headers=request_headers, timeout=self.timeout
            )
        except httpx.TimeoutException as e:
            raise TransportError(
                f"Request to {self.name} timed out after {self.timeout}s",
                provider=self.name,
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(
                f"Request to {self.name} failed: {e.__class__.__name__}",
                provider=self.name,
            ) from e

        if not response.is_success:
            raise TransportError(
                f"API request failed: {response.status_code}",
                provider=self.name,
                status=str(response.status_code),
            )

        return response

    @abstractmethod
    async def resolve(self, address: str) -> GeoLocation:
        """Resolve a raw address to a location.

        Args:
            address: The address exactly as the user wrote it

        Returns:
            The provider's best match

        Raises:
            GeocodingError: If the address cannot be resolved
        """
        pass

    @abstractmethod
    def _translate_response(
        self,
        response_data: Any,
        address: str,
    ) -> GeoLocation:
        """Translate a provider-specific body into a `GeoLocation`.

        Args:
            response_data: Decoded JSON body
            address: The address that was looked up (for error messages)

        Returns:
            GeoLocation for the best match

        Raises:
            NotFoundError: Provider has no match
            ProviderStatusError: Provider error status or malformed body
        """
        pass
