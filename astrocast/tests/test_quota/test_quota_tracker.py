"""Tests for the API credit quota tracker."""

import logging

from astrocast.quota.tracker import QuotaTracker


class TestQuotaTracker:
    def test_nothing_reported(self):
        quota = QuotaTracker(limit=100, warn_threshold=90)
        assert quota.used_today is None
        assert quota.is_near_limit() is False
        assert quota.remaining is None

    def test_below_threshold(self):
        quota = QuotaTracker(limit=100, warn_threshold=90)
        quota.record(40)
        assert quota.is_near_limit() is False
        assert quota.remaining == 60

    def test_near_limit(self):
        quota = QuotaTracker(limit=100, warn_threshold=90)
        quota.record(95)
        assert quota.is_near_limit() is True

    def test_at_threshold(self):
        quota = QuotaTracker(limit=100, warn_threshold=90)
        quota.record(90)
        assert quota.is_near_limit() is True

    def test_warns_when_near(self, caplog):
        quota = QuotaTracker(limit=100, warn_threshold=90)
        with caplog.at_level(logging.WARNING):
            quota.record(95)
        assert "95/100" in caplog.text

    def test_mirrors_provider_counter(self):
        quota = QuotaTracker(limit=100, warn_threshold=90)
        quota.record(95)
        # Provider day rolled over; counter reported lower
        quota.record(3)
        assert quota.used_today == 3
        assert quota.is_near_limit() is False

    def test_remaining_never_negative(self):
        quota = QuotaTracker(limit=100, warn_threshold=90)
        quota.record(120)
        assert quota.remaining == 0
