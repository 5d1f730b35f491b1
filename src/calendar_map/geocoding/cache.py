"""In-process geocode cache.

Maps a normalised address to the outcome of its last resolution:

- a `GeoLocation` (positive entry)
- `None` (negative entry: "already tried, it failed, don't call out again")

An absent key means the address was never attempted. Entries are
write-once: a second `put_*` for a key that already holds a live entry is
ignored, so every lookup for that key keeps returning the first recorded
outcome.

Negative entries can carry a TTL. The geocoding service uses it for
transport failures only, so a network blip does not blacklist an address
for the life of the process; not-found and provider errors are permanent.

## Sharing scope

One cache belongs to one `GeocodingService`. The service returned by
`get_geocoding_service()` is a process-wide singleton, so in the web app the
cache is shared by every request. There is no eviction; the number of
distinct calendar locations a process sees is small.

## Concurrency

`lock(key)` hands out one `asyncio.Lock` per key. Holding it across the
get -> resolve -> put sequence stops two concurrent requests for the same
address from both missing and both calling the provider.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from calendar_map.geocoding.errors import FailureKind
from calendar_map.models.location import GeoLocation

logger = logging.getLogger(__name__)


class CacheStatus(str, Enum):
    """Outcome of a cache lookup."""

    MISS = "miss"
    HIT_POSITIVE = "hit_positive"
    HIT_NEGATIVE = "hit_negative"


@dataclass(frozen=True)
class CacheLookup:
    """Result of `GeocodeCache.get`."""

    status: CacheStatus
    location: GeoLocation | None = None

    @property
    def is_hit(self) -> bool:
        return self.status is not CacheStatus.MISS


@dataclass(frozen=True)
class _CacheEntry:
    location: GeoLocation | None
    failure_kind: FailureKind | None = None
    expires_at: float | None = None


_MISS = CacheLookup(CacheStatus.MISS)
_NEGATIVE = CacheLookup(CacheStatus.HIT_NEGATIVE)


class GeocodeCache:
    """Normalised address -> resolution outcome.

    Example:
        ```python
        cache = GeocodeCache()
        cache.get("262 high holborn")          # CacheLookup(MISS)
        cache.put_positive("262 high holborn", location)
        cache.get("262 high holborn").location  # location
        ```
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        """Initialize the cache.

        Args:
            clock: Monotonic time source for negative-entry TTLs
        """
        self._clock = clock
        self._entries: dict[str, _CacheEntry] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self._live_entry(key) is not None

    def _live_entry(self, key: str) -> _CacheEntry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at is not None and self._clock() >= entry.expires_at:
            logger.debug(f"Negative cache entry for '{key}' expired")
            del self._entries[key]
            return None
        return entry

    def get(self, key: str) -> CacheLookup:
        """Look up a normalised key."""
        entry = self._live_entry(key)
        if entry is None:
            self.misses += 1
            return _MISS

        self.hits += 1
        if entry.location is None:
            return _NEGATIVE
        return CacheLookup(CacheStatus.HIT_POSITIVE, entry.location)

    def put_positive(self, key: str, location: GeoLocation) -> bool:
        """Record a successful resolution.

        Returns:
            False if the key already held a live entry (nothing written)
        """
        return self._put(key, _CacheEntry(location=location))

    def put_negative(
        self,
        key: str,
        failure_kind: FailureKind | None = None,
        ttl_seconds: float | None = None,
    ) -> bool:
        """Record a failed resolution.

        Args:
            key: Normalised address
            failure_kind: Why the resolution failed (kept for diagnostics)
            ttl_seconds: Forget the failure after this long; None = never

        Returns:
            False if the key already held a live entry (nothing written)
        """
        expires_at = None
        if ttl_seconds is not None:
            expires_at = self._clock() + ttl_seconds
        return self._put(
            key,
            _CacheEntry(location=None, failure_kind=failure_kind, expires_at=expires_at),
        )

    def _put(self, key: str, entry: _CacheEntry) -> bool:
        if self._live_entry(key) is not None:
            logger.debug(f"Ignoring second write for cached key '{key}'")
            return False
        self._entries[key] = entry
        return True

    def failure_kind(self, key: str) -> FailureKind | None:
        """Why a negative entry was recorded, if it is one."""
        entry = self._live_entry(key)
        return entry.failure_kind if entry else None

    def lock(self, key: str) -> asyncio.Lock:
        """Advisory lock serialising resolution of one key."""
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    def clear(self) -> None:
        """Drop every entry. The pipeline itself never calls this.

        Per-key locks are kept so a resolution already in flight still
        serialises callers that arrive after the clear.
        """
        logger.info(f"Clearing geocode cache ({len(self._entries)} entries)")
        self._entries.clear()
        self.hits = 0
        self.misses = 0
