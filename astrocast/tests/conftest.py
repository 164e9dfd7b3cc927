"""Shared test fixtures."""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import yaml

from astrocast.config.schema import (
    LocationConfig,
    ProviderConfig,
    StationConfig,
)
from astrocast.models.forecast import FORECAST_HOURS, PROVIDER_KEYS, Channel

WINDOW_START = "2026-10-18T12:00:00Z"

# Raw provider value for every hour of each channel
RAW_SAMPLES: dict[Channel, float] = {
    Channel.CLOUD_COVER: 25.0,
    Channel.TEMPERATURE: 290.0,  # K
    Channel.WIND_SPEED: 10.0,  # m/s
    Channel.DEW_POINT: 280.0,  # K
    Channel.WIND_DIRECTION: 270.0,
    Channel.SEEING: 3.0,
    Channel.TRANSPARENCY: 12.0,
}


def _hours(value: float, count: int) -> list[dict[str, Any]]:
    return [{"Value": {"ActualValue": value}} for _ in range(count)]


@pytest.fixture
def payload_dict() -> Callable[..., dict[str, Any]]:
    """Factory for a GetForecastData_V1 response body as a dict."""

    def _make(
        hours: int = FORECAST_HOURS,
        start: str = WINDOW_START,
        used_today: int | None = 12,
    ) -> dict[str, Any]:
        data: dict[str, Any] = {"UTCStartTime": start}
        if used_today is not None:
            data["APICreditUsedToday"] = used_today
        for channel, value in RAW_SAMPLES.items():
            data[PROVIDER_KEYS[channel]] = _hours(value, hours)
        return data

    return _make


@pytest.fixture
def payload_bytes(payload_dict) -> bytes:
    return json.dumps(payload_dict()).encode()


@pytest.fixture
def api_config() -> StationConfig:
    return StationConfig(
        provider=ProviderConfig(api_key="test-key"),
        location=LocationConfig(latitude=45.5, longitude=286.3),
    )


@pytest.fixture
def config_yaml_path(tmp_path: Path) -> Path:
    """Write a minimal valid config YAML and return its path."""
    data = {
        "provider": {"api_key": "abc123"},
        "location": {"latitude": 45.5, "longitude": -73.6},
        "ops": {"refresh_interval_seconds": 7200},
    }
    path = tmp_path / "test_config.yaml"
    with open(path, "w") as f:
        yaml.dump(data, f)
    return path
