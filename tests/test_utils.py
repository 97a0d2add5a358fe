"""
Tests for caches, date helpers and rounding.
"""

import time
from datetime import date, datetime, timedelta, timezone

from matchlens.utils.cache import AssetCache, SimpleCache
from matchlens.utils.dates import days_between, hours_until, local_day_bounds, parse_datetime
from matchlens.utils.rounding import format_number, round1, round_half_up, round_int


class TestSimpleCache:
    """Test TTL and param-aware lookups."""

    def test_miss_when_empty(self):
        assert SimpleCache(ttl=60).get() == (False, None)

    def test_hit_and_params(self):
        cache = SimpleCache(ttl=60)
        cache.set({"a": 1}, params=50)
        assert cache.get(params=50) == (True, {"a": 1})
        assert cache.get(params=10) == (False, None)
        assert cache.get() == (True, {"a": 1})

    def test_expiry(self):
        cache = SimpleCache(ttl=60)
        cache.set("data")
        cache.timestamp = time.time() - 61
        assert cache.get() == (False, None)

    def test_invalidate(self):
        cache = SimpleCache(ttl=60)
        cache.set("data")
        assert cache.age is not None
        cache.invalidate()
        assert cache.get() == (False, None)
        assert cache.age is None


class TestAssetCache:
    """Test the append-only loaded-asset set."""

    def test_mark_loaded(self):
        cache = AssetCache()
        assert cache.mark_loaded("https://cdn.test/epl.png") is True
        assert cache.mark_loaded("https://cdn.test/epl.png") is False
        assert cache.mark_loaded("") is False
        assert "https://cdn.test/epl.png" in cache
        assert len(cache) == 1

    def test_missing_dedupes_in_order(self):
        cache = AssetCache(["a.png"])
        assert cache.missing(["b.png", "a.png", None, "c.png", "b.png"]) == ["b.png", "c.png"]
        assert cache.has("a.png") is True
        assert cache.has(None) is False


class TestDates:
    """Test timestamp parsing and day arithmetic."""

    def test_parse_z_suffix(self):
        assert parse_datetime("2026-01-17T15:00:00Z") == datetime(2026, 1, 17, 15, tzinfo=timezone.utc)

    def test_naive_read_as_utc(self):
        assert parse_datetime("2026-01-17T15:00:00").tzinfo == timezone.utc
        assert parse_datetime("2026-01-17") == datetime(2026, 1, 17, tzinfo=timezone.utc)
        assert parse_datetime(date(2026, 1, 17)) == datetime(2026, 1, 17, tzinfo=timezone.utc)

    def test_unparseable(self):
        assert parse_datetime("soon") is None
        assert parse_datetime("") is None
        assert parse_datetime(None) is None

    def test_days_between_floors(self):
        start = datetime(2026, 1, 1, 12, tzinfo=timezone.utc)
        assert days_between(start, start + timedelta(hours=47)) == 1
        assert days_between(start + timedelta(hours=48), start) == 2

    def test_day_bounds_follow_now_tz(self):
        tz = timezone(timedelta(hours=-5))
        today, tomorrow, day_after = local_day_bounds(datetime(2026, 1, 17, 23, 30, tzinfo=tz))
        assert today == datetime(2026, 1, 17, tzinfo=tz)
        assert tomorrow == datetime(2026, 1, 18, tzinfo=tz)
        assert day_after == datetime(2026, 1, 19, tzinfo=tz)

    def test_hours_until(self):
        now = datetime(2026, 1, 17, 12, tzinfo=timezone.utc)
        assert hours_until("2026-01-17T15:00:00Z", now) == 3
        assert hours_until("2026-01-17T11:00:00Z", now) == -1
        assert hours_until("bad", now) is None


class TestRounding:
    """Test half-up rounding."""

    def test_half_up(self):
        assert round_int(62.5) == 63
        assert round_int(0.5) == 1
        assert round1(0.25) == 0.3
        assert round1(None) is None
        assert round_half_up(1.75, 1) == 1.8

    def test_format_number(self):
        assert format_number(62.0) == "62"
        assert format_number(62.5) == "62.5"
