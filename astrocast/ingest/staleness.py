"""Staleness checks for cached forecasts."""

from datetime import UTC, datetime, timedelta


def is_fetch_stale(
    last_fetch_at: datetime | None,
    refresh_interval: timedelta,
    now: datetime | None = None,
) -> bool:
    """True when no fetch has happened yet or the last one is at least
    ``refresh_interval`` old."""
    if last_fetch_at is None:
        return True
    if now is None:
        now = datetime.now(UTC)
    return now - last_fetch_at >= refresh_interval


def fetch_age_hours(
    last_fetch_at: datetime | None, now: datetime | None = None
) -> float:
    """Age of the last fetch in hours; inf when never fetched."""
    if last_fetch_at is None:
        return float("inf")
    if now is None:
        now = datetime.now(UTC)
    return (now - last_fetch_at).total_seconds() / 3600
