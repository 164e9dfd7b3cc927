"""Observing-site coordinates: manual entry and companion-device updates."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from pydantic import ValidationError

from astrocast.config.schema import LocationConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float

    @property
    def is_set(self) -> bool:
        # (0, 0) is what an unconfigured site reports
        return not (self.latitude == 0.0 and self.longitude == 0.0)

    def for_provider(self) -> tuple[float, float]:
        """Coordinates as the provider expects them, longitude in [-180, 180]."""
        return self.latitude, normalize_longitude(self.longitude)


def normalize_longitude(longitude: float) -> float:
    if longitude > 180.0:
        return longitude - 360.0
    return longitude


def location_from_config(config: LocationConfig) -> Location | None:
    location = Location(config.latitude, config.longitude)
    return location if location.is_set else None


def location_from_coordinates(
    coords: Mapping[str, float], source: str = "companion"
) -> Location | None:
    """Build a location from a GEOGRAPHIC_COORD style mapping with LAT/LONG keys.

    Returns None (and logs a warning) unless both components are present and
    within the bounds accepted for manual entry.
    """
    lat = coords.get("LAT")
    lon = coords.get("LONG")
    if lat is None or lon is None:
        logger.warning(
            "Coordinates from %s incomplete: LAT=%s, LONG=%s",
            source,
            "found" if lat is not None else "missing",
            "found" if lon is not None else "missing",
        )
        return None
    try:
        checked = LocationConfig(latitude=lat, longitude=lon)
    except ValidationError as e:
        logger.warning(
            "Ignoring out-of-range coordinates from %s (LAT=%r, LONG=%r): %d errors",
            source, lat, lon, e.error_count(),
        )
        return None
    logger.info(
        "Location from %s: Latitude=%.4f, Longitude=%.4f",
        source, checked.latitude, checked.longitude,
    )
    return Location(checked.latitude, checked.longitude)
