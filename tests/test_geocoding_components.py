"""Tests for the address normaliser, static location map, and geocode cache."""

import asyncio

import pytest

from calendar_map.config import LocationMappingConfig
from calendar_map.geocoding.cache import CacheStatus, GeocodeCache
from calendar_map.geocoding.errors import FailureKind
from calendar_map.geocoding.normalizer import normalize_address
from calendar_map.geocoding.static_map import LocationMapping, StaticLocationMap
from calendar_map.models.location import GeoLocation


class TestNormalizeAddress:
    """Tests for cache-key normalisation."""

    @pytest.mark.parametrize(
        "address",
        [
            "262 High Holborn",
            "  262 High Holborn  ",
            "262 HIGH HOLBORN",
            "\t262 high holborn\n",
        ],
    )
    def test_case_and_whitespace_variants_share_a_key(self, address: str):
        assert normalize_address(address) == "262 high holborn"

    def test_idempotent(self):
        once = normalize_address("  PD-2-301 ")
        assert normalize_address(once) == once

    def test_inner_whitespace_is_kept(self):
        assert normalize_address("A  B") == "a  b"


class TestStaticLocationMap:
    """Tests for prefix overrides."""

    def test_prefix_match(self, static_map: StaticLocationMap, high_holborn: GeoLocation):
        assert static_map.lookup("PD-2-301") == high_holborn

    def test_no_match(self, static_map: StaticLocationMap):
        assert static_map.lookup("262 High Holborn") is None

    def test_match_is_case_sensitive(self, static_map: StaticLocationMap):
        assert static_map.lookup("pd-2-301") is None

    def test_match_uses_raw_address(self, static_map: StaticLocationMap):
        """Leading whitespace means the prefix does not match."""
        assert static_map.lookup("  PD-2-301") is None

    def test_first_matching_entry_wins(
        self, high_holborn: GeoLocation, downing_street: GeoLocation
    ):
        """Test overlapping prefixes resolve in table order."""
        static_map = StaticLocationMap(
            [
                LocationMapping("PD-", downing_street),
                LocationMapping("PD-2-", high_holborn),
            ]
        )
        assert static_map.lookup("PD-2-301") == downing_street

        reordered = StaticLocationMap(reversed(static_map.mappings))
        assert reordered.lookup("PD-2-301") == high_holborn

    def test_empty_map(self):
        assert StaticLocationMap().lookup("anything") is None

    def test_from_config(self):
        static_map = StaticLocationMap.from_config(
            [
                LocationMappingConfig(
                    prefix="HQ-",
                    latitude=40.0,
                    longitude=-74.0,
                    formatted_address="Head Office",
                )
            ]
        )
        assert len(static_map) == 1
        location = static_map.lookup("HQ-4")
        assert location is not None
        assert location.formatted_address == "Head Office"


class TestGeocodeCache:
    """Tests for the geocode cache."""

    def test_miss(self):
        cache = GeocodeCache()
        lookup = cache.get("nowhere")
        assert lookup.status is CacheStatus.MISS
        assert not lookup.is_hit
        assert cache.misses == 1

    def test_positive_hit(self, high_holborn: GeoLocation):
        cache = GeocodeCache()
        assert cache.put_positive("262 high holborn", high_holborn) is True

        lookup = cache.get("262 high holborn")
        assert lookup.status is CacheStatus.HIT_POSITIVE
        assert lookup.location == high_holborn
        assert cache.hits == 1

    def test_negative_hit_is_distinct_from_miss(self):
        cache = GeocodeCache()
        cache.put_negative("atlantis", FailureKind.NOT_FOUND)

        lookup = cache.get("atlantis")
        assert lookup.status is CacheStatus.HIT_NEGATIVE
        assert lookup.location is None
        assert "atlantis" in cache
        assert cache.failure_kind("atlantis") is FailureKind.NOT_FOUND

    def test_entries_are_write_once(
        self, high_holborn: GeoLocation, downing_street: GeoLocation
    ):
        cache = GeocodeCache()
        cache.put_positive("key", high_holborn)

        assert cache.put_positive("key", downing_street) is False
        assert cache.put_negative("key") is False
        assert cache.get("key").location == high_holborn

    def test_negative_entry_without_ttl_never_expires(self, fake_clock):
        cache = GeocodeCache(clock=fake_clock)
        cache.put_negative("atlantis", FailureKind.PROVIDER_ERROR)

        fake_clock.advance(10**9)
        assert cache.get("atlantis").status is CacheStatus.HIT_NEGATIVE

    def test_negative_entry_with_ttl_expires(self, fake_clock):
        cache = GeocodeCache(clock=fake_clock)
        cache.put_negative("flaky", FailureKind.TRANSPORT, ttl_seconds=60)

        fake_clock.advance(59)
        assert cache.get("flaky").status is CacheStatus.HIT_NEGATIVE

        fake_clock.advance(1)
        assert cache.get("flaky").status is CacheStatus.MISS
        assert len(cache) == 0

    def test_expired_entry_can_be_rewritten(self, fake_clock, high_holborn: GeoLocation):
        cache = GeocodeCache(clock=fake_clock)
        cache.put_negative("flaky", FailureKind.TRANSPORT, ttl_seconds=1)
        fake_clock.advance(2)

        assert cache.put_positive("flaky", high_holborn) is True
        assert cache.get("flaky").location == high_holborn

    def test_clear(self, high_holborn: GeoLocation):
        cache = GeocodeCache()
        cache.put_positive("a", high_holborn)
        cache.put_negative("b")

        cache.clear()

        assert len(cache) == 0
        assert cache.get("a").status is CacheStatus.MISS

    def test_clear_keeps_locks(self, high_holborn: GeoLocation):
        cache = GeocodeCache()
        lock = cache.lock("a")
        cache.put_positive("a", high_holborn)

        cache.clear()

        assert cache.lock("a") is lock

    def test_lock_is_per_key(self):
        cache = GeocodeCache()
        assert cache.lock("a") is cache.lock("a")
        assert cache.lock("a") is not cache.lock("b")

    @pytest.mark.asyncio
    async def test_lock_serialises_same_key(self):
        cache = GeocodeCache()
        order: list[str] = []

        async def worker(name: str):
            async with cache.lock("key"):
                order.append(f"{name}-in")
                await asyncio.sleep(0.01)
                order.append(f"{name}-out")

        await asyncio.gather(worker("a"), worker("b"))

        assert order == ["a-in", "a-out", "b-in", "b-out"]
