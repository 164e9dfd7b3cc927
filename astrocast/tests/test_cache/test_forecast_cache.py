"""Tests for the in-memory forecast cache."""

from datetime import UTC, datetime, timedelta

import pytest

from astrocast.cache.forecast_cache import CacheSnapshot, ForecastCache
from astrocast.ingest.forecast_parser import parse_forecast
from astrocast.models.common import FailureKind
from astrocast.models.forecast import ForecastRecord

INTERVAL = timedelta(hours=6)
FETCHED_AT = datetime(2026, 10, 18, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def record(payload_bytes: bytes) -> ForecastRecord:
    result = parse_forecast(payload_bytes)
    assert isinstance(result, ForecastRecord)
    return result


class TestIsStale:
    def test_empty_cache_is_stale(self):
        cache = ForecastCache()
        assert cache.is_stale(FETCHED_AT, INTERVAL) is True

    def test_fresh_after_replace(self, record):
        cache = ForecastCache()
        cache.replace(record, FETCHED_AT)
        assert cache.is_stale(FETCHED_AT + timedelta(hours=1), INTERVAL) is False

    def test_stale_at_interval(self, record):
        cache = ForecastCache()
        cache.replace(record, FETCHED_AT)
        assert cache.is_stale(FETCHED_AT + INTERVAL, INTERVAL) is True

    def test_invalid_is_stale(self, record):
        cache = ForecastCache()
        cache.replace(record, FETCHED_AT)
        cache.invalidate(FailureKind.TRANSPORT_FAILURE)
        assert cache.is_stale(FETCHED_AT, INTERVAL) is True

    def test_idempotent(self, record):
        cache = ForecastCache()
        cache.replace(record, FETCHED_AT)
        now = FETCHED_AT + timedelta(hours=3)
        assert cache.is_stale(now, INTERVAL) == cache.is_stale(now, INTERVAL)
        assert cache.snapshot.valid is True


class TestMutations:
    def test_initial_snapshot(self):
        cache = ForecastCache()
        assert cache.snapshot == CacheSnapshot()
        assert cache.read_latest() is None

    def test_replace(self, record):
        cache = ForecastCache()
        cache.replace(record, FETCHED_AT)
        s = cache.snapshot
        assert s.current is record
        assert s.last_fetch_at == FETCHED_AT
        assert s.valid is True
        assert s.reason is None

    def test_invalidate_keeps_record(self, record):
        cache = ForecastCache()
        cache.replace(record, FETCHED_AT)
        cache.invalidate(FailureKind.LENGTH_MISMATCH)
        s = cache.snapshot
        assert s.valid is False
        assert s.current is record
        assert s.last_fetch_at == FETCHED_AT
        assert s.reason == FailureKind.LENGTH_MISMATCH
        assert cache.read_latest() is record

    def test_replace_clears_reason(self, record):
        cache = ForecastCache()
        cache.invalidate(FailureKind.TRANSPORT_FAILURE)
        cache.replace(record, FETCHED_AT)
        assert cache.snapshot.reason is None

    def test_old_snapshot_untouched(self, record):
        cache = ForecastCache()
        cache.replace(record, FETCHED_AT)
        before = cache.snapshot
        cache.invalidate(FailureKind.OUT_OF_RANGE)
        assert before.valid is True
        assert cache.snapshot is not before

    def test_reset(self, record):
        cache = ForecastCache()
        cache.replace(record, FETCHED_AT)
        cache.reset()
        assert cache.snapshot == CacheSnapshot()
