"""Geocoding orchestrator.

`GeocodingService.geocode` is the only entry point the rest of the app uses.
For one address it runs, in this order and stopping at the first answer:

1. empty address -> no location (nothing cached, no provider call)
2. normalise the address into a cache key
3. cache: positive hit -> location, negative hit -> no location
4. static prefix map on the raw address -> location (and cache it)
5. provider on the raw address -> cache the location, or cache the failure

Every failure is absorbed here. Callers get `None` and carry on with the
next event; the failure kind is only visible in the logs. The one exception
is a missing API key, which fails `from_settings()` at startup.

Transport failures are cached with a TTL so a network blip does not
blacklist an address forever; not-found and provider errors are cached for
the life of the process.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from functools import lru_cache

from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from calendar_map.config import Settings, get_settings
from calendar_map.geocoding.cache import CacheStatus, GeocodeCache
from calendar_map.geocoding.errors import FailureKind, GeocodingError, TransportError
from calendar_map.geocoding.normalizer import normalize_address
from calendar_map.geocoding.providers.base import GeocodeProvider
from calendar_map.geocoding.providers.google import GoogleGeocodeProvider
from calendar_map.geocoding.static_map import StaticLocationMap
from calendar_map.models.location import GeoLocation

logger = logging.getLogger(__name__)


class GeocodingService:
    """Resolve free-text addresses to locations.

    Example:
        ```python
        service = GeocodingService.from_settings(get_settings())

        location = await service.geocode("262 High Holborn")
        locations = await service.geocode_many(["PD-2-301", "10 Downing St"])
        ```
    """

    def __init__(
        self,
        provider: GeocodeProvider,
        cache: GeocodeCache | None = None,
        static_map: StaticLocationMap | None = None,
        transport_failure_ttl_seconds: float | None = None,
        transport_retries: int = 0,
        retry_wait: wait_base | None = None,
        concurrency: int = 4,
    ):
        """Initialize the service.

        Args:
            provider: External geocoder
            cache: Outcome cache (a private one is created if omitted)
            static_map: Prefix overrides checked before the provider
            transport_failure_ttl_seconds: How long to remember transport
                failures. None = forever, 0 = don't cache them at all.
            transport_retries: Extra provider attempts after a transport failure
            retry_wait: tenacity wait strategy between those attempts
            concurrency: Max in-flight resolutions in `geocode_many`
        """
        self.provider = provider
        self.cache = cache if cache is not None else GeocodeCache()
        self.static_map = static_map if static_map is not None else StaticLocationMap()
        self.transport_failure_ttl_seconds = transport_failure_ttl_seconds
        self.transport_retries = transport_retries
        self.retry_wait = retry_wait or wait_exponential(multiplier=0.5, max=5)
        self.concurrency = max(1, concurrency)

    @classmethod
    def from_settings(cls, settings: Settings) -> GeocodingService:
        """Build the production service: Google provider plus configured map.

        Raises:
            MisconfiguredError: If GOOGLE_MAPS_API_KEY is not set
        """
        provider = GoogleGeocodeProvider(
            api_key=settings.google_maps_api_key,
            base_url=settings.geocode_url,
            timeout=settings.geocode_timeout_seconds,
            user_agent=f"calendar-map/{settings.app_version}",
        )
        return cls(
            provider=provider,
            static_map=StaticLocationMap.from_config(settings.location_mappings),
            transport_failure_ttl_seconds=settings.geocode_transport_failure_ttl_seconds,
            transport_retries=settings.geocode_transport_retries,
            concurrency=settings.geocode_concurrency,
        )

    async def aclose(self) -> None:
        await self.provider.aclose()

    async def geocode(self, raw_address: str | None) -> GeoLocation | None:
        """Resolve one address. Never raises.

        Args:
            raw_address: Address as written in the calendar entry

        Returns:
            The location, or None if the address could not be resolved
        """
        if raw_address is None or not raw_address.strip():
            return None

        try:
            key = normalize_address(raw_address)
            async with self.cache.lock(key):
                return await self._resolve(raw_address, key)
        except Exception:
            logger.exception(f"Error geocoding address '{raw_address}'")
            return None

    async def geocode_many(
        self, addresses: Iterable[str | None]
    ) -> list[GeoLocation | None]:
        """Resolve a batch of addresses with bounded concurrency.

        Results line up with the input: result[i] belongs to addresses[i].
        """
        semaphore = asyncio.Semaphore(self.concurrency)

        async def _one(address: str | None) -> GeoLocation | None:
            async with semaphore:
                return await self.geocode(address)

        return list(await asyncio.gather(*(_one(a) for a in addresses)))

    async def _resolve(self, raw_address: str, key: str) -> GeoLocation | None:
        lookup = self.cache.get(key)
        if lookup.status is CacheStatus.HIT_POSITIVE:
            logger.debug(f"Cache hit for '{raw_address}'")
            return lookup.location
        if lookup.status is CacheStatus.HIT_NEGATIVE:
            logger.debug(f"Negative cache hit for '{raw_address}'")
            return None

        location = self.static_map.lookup(raw_address)
        if location is not None:
            logger.info(f"Resolved '{raw_address}' from static location map")
            self.cache.put_positive(key, location)
            return location

        try:
            location = await self._call_provider(raw_address)
        except GeocodingError as e:
            self._log_failure(raw_address, e)
            self._remember_failure(key, e)
            return None

        self.cache.put_positive(key, location)
        logger.info(f"Cached geocoding result for '{raw_address}'")
        return location

    async def _call_provider(self, raw_address: str) -> GeoLocation:
        if self.transport_retries <= 0:
            return await self.provider.resolve(raw_address)

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.transport_retries + 1),
            wait=self.retry_wait,
            retry=retry_if_exception_type(TransportError),
            reraise=True,
        )
        return await retrying(self.provider.resolve, raw_address)

    def _remember_failure(self, key: str, error: GeocodingError) -> None:
        if error.kind is FailureKind.TRANSPORT:
            if self.transport_failure_ttl_seconds == 0:
                return
            self.cache.put_negative(
                key, error.kind, ttl_seconds=self.transport_failure_ttl_seconds
            )
            return
        self.cache.put_negative(key, error.kind)

    @staticmethod
    def _log_failure(raw_address: str, error: GeocodingError) -> None:
        if error.kind is FailureKind.NOT_FOUND:
            logger.info(f"No geocoding result for '{raw_address}'")
        elif error.kind is FailureKind.TRANSPORT:
            logger.warning(f"Geocoding transport failure for '{raw_address}': {error}")
        else:
            logger.error(
                f"Geocoding provider error for '{raw_address}' "
                f"(status={error.status}): {error}"
            )


@lru_cache
def get_geocoding_service() -> GeocodingService:
    """Process-wide service, so every request shares one cache.

    Raises:
        MisconfiguredError: If GOOGLE_MAPS_API_KEY is not set
    """
    return GeocodingService.from_settings(get_settings())
