"""Refresh scheduler: per-tick state machine over fetch, parse, cache and index.

A host calls ``tick(now)`` on a fixed cadence and ``on_config_changed`` when
the API key or site location changes. Nothing else writes to the cache or the
quota tracker.
"""

import logging
import threading
from datetime import datetime, timedelta

import httpx

from astrocast.cache.forecast_cache import ForecastCache
from astrocast.cache.time_indexer import index_for
from astrocast.config.defaults import SIMULATED_VALUES
from astrocast.config.location import (
    Location,
    location_from_config,
    location_from_coordinates,
)
from astrocast.config.schema import StationConfig, WeatherMode
from astrocast.ingest.astrospheric_client import AstrosphericClient
from astrocast.ingest.forecast_parser import parse_forecast
from astrocast.models.common import FailureKind, utc_now
from astrocast.models.forecast import (
    ForecastRecord,
    OutOfRange,
    ParseFailure,
    WeatherValues,
)
from astrocast.models.status import (
    STATUS_FOR_STATE,
    DeviceStatus,
    SchedulerState,
    TickResult,
)
from astrocast.quota.tracker import QuotaTracker
from astrocast.reporting.formatters import format_weather_summary

logger = logging.getLogger(__name__)


class RefreshScheduler:
    def __init__(
        self,
        config: StationConfig,
        client: AstrosphericClient,
        cache: ForecastCache | None = None,
        quota: QuotaTracker | None = None,
    ):
        self.config = config
        self.client = client
        self.cache = cache if cache is not None else ForecastCache()
        self.quota = quota if quota is not None else QuotaTracker(
            config.quota.daily_limit, config.quota.warn_threshold
        )
        self.mode = config.mode
        self.api_key = config.provider.api_key
        self.location: Location | None = location_from_config(config.location)
        self.refresh_interval = timedelta(
            seconds=config.ops.refresh_interval_seconds
        )
        self.state = SchedulerState.IDLE
        self._last_values: WeatherValues | None = None
        self._generation = 0
        self._closed = False
        # Held for the whole tick; a second tick that can't get it is a no-op
        self._tick_lock = threading.Lock()
        # Guards config/generation against cache writes from a finishing fetch
        self._state_lock = threading.RLock()

    @property
    def status(self) -> DeviceStatus:
        return STATUS_FOR_STATE[self.state]

    def tick(self, now: datetime | None = None) -> TickResult:
        """Run one refresh/lookup cycle."""
        if self._closed:
            return TickResult(status=DeviceStatus.IDLE, state=SchedulerState.IDLE)
        if not self._tick_lock.acquire(blocking=False):
            logger.debug("Fetch already in flight, skipping tick")
            return TickResult(
                status=DeviceStatus.BUSY,
                state=SchedulerState.FETCHING,
                values=self._last_values,
            )
        try:
            if now is None:
                now = utc_now()
            if self.mode == WeatherMode.SIMULATED:
                return self._simulated_tick()
            return self._api_tick(now)
        finally:
            self._tick_lock.release()

    def current_values(self, now: datetime | None = None) -> WeatherValues | None:
        """Values for ``now`` from the cache without fetching or mutating.

        Returns None when the cache is invalid or ``now`` is outside the window.
        """
        if now is None:
            now = utc_now()
        snapshot = self.cache.snapshot
        if not snapshot.valid or snapshot.current is None:
            return None
        offset = index_for(now, snapshot.current)
        if isinstance(offset, OutOfRange):
            return None
        return snapshot.current.values_at(offset)

    def on_config_changed(self, credential: str, location: Location | None) -> None:
        """Apply a new API key and/or site location from the host."""
        with self._state_lock:
            if location != self.location:
                self._generation += 1
                self.location = location
                self.cache.reset()
                self._last_values = None
                if location is not None:
                    logger.info(
                        "Location updated: Latitude=%.4f, Longitude=%.4f",
                        location.latitude, location.longitude,
                    )
                else:
                    logger.info("Location cleared")
            if credential != self.api_key:
                self._generation += 1
                self.api_key = credential
                self.cache.invalidate("credential changed")
                logger.info("API key updated")

    def on_companion_coordinates(self, coords: dict[str, float], source: str) -> None:
        """Take the site location from a companion device's coordinates."""
        location = location_from_coordinates(coords, source)
        if location is not None:
            self.on_config_changed(self.api_key, location)

    def set_mode(self, mode: WeatherMode) -> None:
        with self._state_lock:
            if mode == self.mode:
                return
            self._generation += 1
            self.mode = mode
            self.cache.invalidate("mode changed")
            logger.info("Mode updated to: %s", mode.value)

    def close(self) -> None:
        """Tear down; a fetch still in flight will have its result dropped."""
        with self._state_lock:
            self._generation += 1
            self._closed = True
            self.cache.reset()
            self.state = SchedulerState.IDLE
        logger.info("Scheduler closed")

    def _simulated_tick(self) -> TickResult:
        logger.info("Updating weather in simulated mode")
        self.state = SchedulerState.VALID
        self._last_values = SIMULATED_VALUES
        return TickResult(
            status=DeviceStatus.OK,
            state=self.state,
            values=SIMULATED_VALUES,
            summary=format_weather_summary(SIMULATED_VALUES),
        )

    def _api_tick(self, now: datetime) -> TickResult:
        with self._state_lock:
            api_key = self.api_key
            location = self.location
            generation = self._generation

        if not api_key:
            logger.error("API key is not set")
            return self._alert(FailureKind.NO_CREDENTIAL)
        if location is None or not location.is_set:
            logger.error("Location is not set")
            return self._alert(FailureKind.NO_LOCATION)

        outcome: ForecastRecord | FailureKind | None = None
        if self.cache.is_stale(now, self.refresh_interval):
            self.state = SchedulerState.FETCHING
            outcome = self._fetch(location, api_key)

        fetched = outcome is not None
        with self._state_lock:
            # Config may have changed while fetching or while checking staleness
            if generation != self._generation:
                return self._discard(fetched)
            if isinstance(outcome, FailureKind):
                return self._alert(outcome, fetched=True)
            if outcome is not None:
                self.cache.replace(outcome, now)
                if outcome.used_today is not None:
                    self.quota.record(outcome.used_today)
            snapshot = self.cache.snapshot
            if not snapshot.valid or snapshot.current is None:
                return self._discard(fetched)
            return self._serve(now, snapshot.current, fetched)

    def _fetch(self, location: Location, api_key: str) -> ForecastRecord | FailureKind:
        logger.info("Fetching new forecast data...")
        try:
            payload = self.client.get_forecast(location, api_key)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error("Forecast request failed: %s", e)
            return FailureKind.TRANSPORT_FAILURE
        result = parse_forecast(payload, self.config.provider.forecast_hours)
        if isinstance(result, ParseFailure):
            logger.error("Failed to parse forecast data (%s): %s", result.kind, result.detail)
            return result.kind
        return result

    def _discard(self, fetched: bool) -> TickResult:
        logger.warning("Discarding tick started under a previous configuration")
        self.state = SchedulerState.IDLE
        return TickResult(
            status=DeviceStatus.IDLE, state=SchedulerState.IDLE, fetched=fetched
        )

    def _serve(self, now: datetime, record: ForecastRecord, fetched: bool) -> TickResult:
        offset = index_for(now, record)
        if isinstance(offset, OutOfRange):
            logger.error(
                "Current time outside forecast range. Offset: %d", offset.offset
            )
            return self._alert(FailureKind.OUT_OF_RANGE, fetched=fetched)

        values = record.values_at(offset)
        self._last_values = values
        self.state = SchedulerState.VALID
        logger.info(
            "Weather updated for hour %d: Cloud=%.2f%%, Temp=%.2fC, Wind=%.2fkph",
            offset, values.cloud_cover, values.temperature, values.wind_speed,
        )
        return TickResult(
            status=DeviceStatus.OK,
            state=self.state,
            values=values,
            hour_offset=offset,
            fetched=fetched,
            summary=format_weather_summary(values),
        )

    def _alert(self, cause: FailureKind, fetched: bool = False) -> TickResult:
        self.cache.invalidate(cause)
        self.state = SchedulerState.ALERT
        return TickResult(
            status=DeviceStatus.ALERT,
            state=self.state,
            values=self._last_values,
            cause=cause,
            fetched=fetched,
        )
