"""Astrospheric forecast data models."""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from types import MappingProxyType

from astrocast.models.common import FailureKind

FORECAST_HOURS = 82  # Hours per channel in the GetForecastData_V1 contract
# Parameter a host should gate on; reported alongside values in JSON output
CRITICAL_PARAMETER = "WEATHER_CLOUD_COVER"


class Channel(StrEnum):
    CLOUD_COVER = "cloud_cover"
    TEMPERATURE = "temperature"
    WIND_SPEED = "wind_speed"
    DEW_POINT = "dew_point"
    WIND_DIRECTION = "wind_direction"
    SEEING = "seeing"
    TRANSPARENCY = "transparency"


# Provider payload key for each channel
PROVIDER_KEYS: dict[Channel, str] = {
    Channel.CLOUD_COVER: "RDPS_CloudCover",
    Channel.TEMPERATURE: "RDPS_Temperature",
    Channel.WIND_SPEED: "RDPS_WindVelocity",
    Channel.DEW_POINT: "RDPS_DewPoint",
    Channel.WIND_DIRECTION: "RDPS_WindDirection",
    Channel.SEEING: "Astrospheric_Seeing",
    Channel.TRANSPARENCY: "Astrospheric_Transparency",
}

# Published parameter name for each channel
PARAMETER_NAMES: dict[Channel, str] = {
    Channel.CLOUD_COVER: "WEATHER_CLOUD_COVER",
    Channel.TEMPERATURE: "WEATHER_TEMPERATURE",
    Channel.WIND_SPEED: "WEATHER_WIND_SPEED",
    Channel.DEW_POINT: "WEATHER_DEW_POINT",
    Channel.WIND_DIRECTION: "WEATHER_WIND_DIRECTION",
    Channel.SEEING: "WEATHER_SEEING",
    Channel.TRANSPARENCY: "WEATHER_TRANSPARENCY",
}


@dataclass(frozen=True)
class WeatherValues:
    cloud_cover: float  # %
    temperature: float  # C
    wind_speed: float  # km/h
    dew_point: float  # C
    wind_direction: float  # degrees
    seeing: float  # 0-5 index
    transparency: float  # 0-27+ index

    def as_dict(self) -> dict[str, float]:
        return {
            PARAMETER_NAMES[channel]: getattr(self, channel.value)
            for channel in Channel
        }


@dataclass(frozen=True)
class ForecastRecord:
    window_start: datetime  # UTC, hour offset 0
    series: Mapping[Channel, tuple[float, ...]]
    used_today: int | None = None

    def __post_init__(self) -> None:
        # Read-only copy so channels can't be swapped after construction
        series = {channel: tuple(samples) for channel, samples in self.series.items()}
        object.__setattr__(self, "series", MappingProxyType(series))

    @property
    def hours(self) -> int:
        return len(self.series[Channel.CLOUD_COVER])

    def values_at(self, offset: int) -> WeatherValues:
        return WeatherValues(
            **{channel.value: self.series[channel][offset] for channel in Channel}
        )


@dataclass(frozen=True)
class ParseFailure:
    kind: FailureKind
    detail: str


@dataclass(frozen=True)
class OutOfRange:
    offset: int
    hours: int
