"""In-memory forecast cache for a single observing site.

All state lives in one immutable CacheSnapshot; every mutation builds a new
snapshot and swaps the reference, so readers never see a half-updated cache.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from astrocast.ingest.staleness import is_fetch_stale
from astrocast.models.common import FailureKind
from astrocast.models.forecast import ForecastRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheSnapshot:
    current: ForecastRecord | None = None
    last_fetch_at: datetime | None = None
    valid: bool = False
    reason: str | None = None  # usually a FailureKind


class ForecastCache:
    def __init__(self) -> None:
        self._snapshot = CacheSnapshot()

    @property
    def snapshot(self) -> CacheSnapshot:
        return self._snapshot

    def is_stale(self, now: datetime, refresh_interval: timedelta) -> bool:
        s = self._snapshot
        if s.current is None or not s.valid:
            return True
        return is_fetch_stale(s.last_fetch_at, refresh_interval, now)

    def replace(self, record: ForecastRecord, fetch_time: datetime) -> None:
        self._snapshot = CacheSnapshot(
            current=record, last_fetch_at=fetch_time, valid=True
        )

    def invalidate(self, reason: FailureKind | str) -> None:
        """Mark the cache invalid, keeping the last record for diagnostics."""
        s = self._snapshot
        logger.info("Forecast cache invalidated: %s", reason)
        self._snapshot = CacheSnapshot(
            current=s.current,
            last_fetch_at=s.last_fetch_at,
            valid=False,
            reason=reason,
        )

    def read_latest(self) -> ForecastRecord | None:
        return self._snapshot.current

    def reset(self) -> None:
        self._snapshot = CacheSnapshot()
