"""Forecast parser: turns a raw Astrospheric payload into a validated record."""

import json
import logging
import math
from datetime import UTC, datetime

from astrocast.models.common import FailureKind
from astrocast.models.forecast import (
    FORECAST_HOURS,
    PROVIDER_KEYS,
    Channel,
    ForecastRecord,
    ParseFailure,
)

logger = logging.getLogger(__name__)

UTC_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
KELVIN_OFFSET = 273.15
MS_TO_KMH = 3.6
SUBSTITUTE_SAMPLE = 0.0


def parse_forecast(
    payload: bytes | str, expected_hours: int = FORECAST_HOURS
) -> ForecastRecord | ParseFailure:
    """Decode and validate a GetForecastData_V1 response.

    Returns the first failure encountered; a ForecastRecord is only built
    once every channel is present and exactly ``expected_hours`` long.
    """
    try:
        data = json.loads(payload)
    except (ValueError, TypeError) as e:
        return ParseFailure(FailureKind.MALFORMED_PAYLOAD, f"JSON decode error: {e}")
    if not isinstance(data, dict):
        return ParseFailure(
            FailureKind.MALFORMED_PAYLOAD,
            f"expected a JSON object, got {type(data).__name__}",
        )

    start_raw = data.get("UTCStartTime")
    window_start = parse_utc_timestamp(start_raw)
    if window_start is None:
        return ParseFailure(
            FailureKind.BAD_TIMESTAMP, f"unparseable UTCStartTime: {start_raw!r}"
        )

    used_today = _extract_used_today(data)

    series: dict[Channel, tuple[float, ...]] = {}
    for channel in Channel:
        key = PROVIDER_KEYS[channel]
        entries = data.get(key)
        if not isinstance(entries, list):
            return ParseFailure(
                FailureKind.MISSING_CHANNEL, f"{key} missing or not an array"
            )
        series[channel] = _extract_samples(channel, key, entries)

    for channel, samples in series.items():
        if len(samples) != expected_hours:
            logger.error(
                "Forecast data length mismatch: %s has %d hours, expected %d",
                PROVIDER_KEYS[channel], len(samples), expected_hours,
            )
            return ParseFailure(
                FailureKind.LENGTH_MISMATCH,
                f"{PROVIDER_KEYS[channel]} has {len(samples)} hours, "
                f"expected {expected_hours}",
            )

    logger.info(
        "Parsed forecast for %d hours starting at %s", expected_hours, start_raw
    )
    return ForecastRecord(
        window_start=window_start,
        series=series,
        used_today=used_today,
    )


def parse_utc_timestamp(value: object) -> datetime | None:
    """Parse a ``YYYY-MM-DDTHH:MM:SSZ`` string as an aware UTC datetime."""
    if not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value, UTC_TIMESTAMP_FORMAT).replace(tzinfo=UTC)
    except ValueError:
        return None


def _extract_used_today(data: dict) -> int | None:
    raw = data.get("APICreditUsedToday")
    if raw is None:
        return None
    if isinstance(raw, bool) or not isinstance(raw, int):
        logger.warning("Ignoring non-integer APICreditUsedToday: %r", raw)
        return None
    logger.info("API credits used today: %d", raw)
    return raw


def _extract_samples(
    channel: Channel, key: str, entries: list
) -> tuple[float, ...]:
    samples: list[float] = []
    for hour, entry in enumerate(entries):
        raw = _actual_value(entry)
        converted = _convert(channel, raw) if raw is not None else None
        if converted is None or not math.isfinite(converted):
            logger.warning(
                "%s hour %d has no finite numeric ActualValue, using %.1f",
                key, hour, SUBSTITUTE_SAMPLE,
            )
            samples.append(SUBSTITUTE_SAMPLE)
            continue
        samples.append(converted)
    return tuple(samples)


def _actual_value(entry: object) -> float | None:
    if not isinstance(entry, dict):
        return None
    value = entry.get("Value")
    if not isinstance(value, dict):
        return None
    actual = value.get("ActualValue")
    if isinstance(actual, bool) or not isinstance(actual, int | float):
        return None
    try:
        return float(actual)
    except OverflowError:
        # JSON integers have no size limit
        return None


def _convert(channel: Channel, value: float) -> float:
    """Convert provider units to consumer units (K -> C, m/s -> km/h)."""
    if channel in (Channel.TEMPERATURE, Channel.DEW_POINT):
        return value - KELVIN_OFFSET
    if channel == Channel.WIND_SPEED:
        return value * MS_TO_KMH
    return value
