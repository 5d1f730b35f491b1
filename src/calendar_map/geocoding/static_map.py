"""Operator-maintained address overrides.

Some calendar locations are internal room or building codes ("PD-2-301")
that no public geocoder understands. The static map pins those to fixed
coordinates by prefix, before any external lookup happens.

Matching rules:
- the prefix is compared against the address as written (no trimming,
  case-sensitive)
- entries are tried in the order they were configured; the first match wins
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from calendar_map.config import LocationMappingConfig
from calendar_map.models.location import GeoLocation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocationMapping:
    """One prefix override."""

    prefix: str
    location: GeoLocation

    @classmethod
    def from_config(cls, config: LocationMappingConfig) -> LocationMapping:
        return cls(
            prefix=config.prefix,
            location=GeoLocation(
                latitude=config.latitude,
                longitude=config.longitude,
                formatted_address=config.formatted_address,
            ),
        )


class StaticLocationMap:
    """Ordered table of address-prefix overrides.

    Example:
        ```python
        static_map = StaticLocationMap([
            LocationMapping("PD-2-", GeoLocation(latitude=51.5179, ...)),
        ])
        static_map.lookup("PD-2-301")  # -> the High Holborn location
        ```
    """

    def __init__(self, mappings: Iterable[LocationMapping] = ()):
        self._mappings: tuple[LocationMapping, ...] = tuple(mappings)

    @classmethod
    def from_config(cls, configs: Iterable[LocationMappingConfig]) -> StaticLocationMap:
        return cls(LocationMapping.from_config(c) for c in configs)

    def __len__(self) -> int:
        return len(self._mappings)

    @property
    def mappings(self) -> tuple[LocationMapping, ...]:
        return self._mappings

    def lookup(self, raw_address: str) -> GeoLocation | None:
        """Return the location of the first entry whose prefix matches."""
        for mapping in self._mappings:
            if raw_address.startswith(mapping.prefix):
                logger.debug(
                    f"Found mapping for '{raw_address}' using prefix '{mapping.prefix}'"
                )
                return mapping.location
        return None
