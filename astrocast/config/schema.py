"""Pydantic v2 configuration schema with strict validation."""

from enum import StrEnum

from pydantic import BaseModel, Field, model_validator

from astrocast.models.forecast import FORECAST_HOURS


class WeatherMode(StrEnum):
    API = "api"
    SIMULATED = "simulated"


class ProviderConfig(BaseModel):
    model_config = {"extra": "forbid"}

    base_url: str = "https://astrosphericpublicaccess.azurewebsites.net"
    endpoint: str = "/api/GetForecastData_V1"
    api_key: str = ""
    connect_timeout_seconds: float = Field(default=5.0, gt=0.0)
    read_timeout_seconds: float = Field(default=15.0, gt=0.0)
    forecast_hours: int = Field(default=FORECAST_HOURS, ge=1)


class LocationConfig(BaseModel):
    model_config = {"extra": "forbid"}

    latitude: float = Field(default=0.0, ge=-90.0, le=90.0)
    longitude: float = Field(default=0.0, ge=-180.0, le=360.0)


class QuotaConfig(BaseModel):
    model_config = {"extra": "forbid"}

    daily_limit: int = Field(default=100, ge=1)
    warn_threshold: int = Field(default=90, ge=0)

    @model_validator(mode="after")
    def _threshold_within_limit(self) -> "QuotaConfig":
        if self.warn_threshold > self.daily_limit:
            raise ValueError("warn_threshold must not exceed daily_limit")
        return self


class OpsConfig(BaseModel):
    model_config = {"extra": "forbid"}

    tick_interval_seconds: int = Field(default=1800, ge=1, le=3600)
    refresh_interval_seconds: int = Field(default=21600, ge=1)
    max_refresh_interval_seconds: int = Field(default=86400, ge=1)

    @model_validator(mode="after")
    def _refresh_within_bound(self) -> "OpsConfig":
        if self.refresh_interval_seconds > self.max_refresh_interval_seconds:
            raise ValueError(
                "refresh_interval_seconds must not exceed "
                "max_refresh_interval_seconds"
            )
        return self


class StationConfig(BaseModel):
    model_config = {"extra": "forbid"}

    mode: WeatherMode = WeatherMode.API
    provider: ProviderConfig = ProviderConfig()
    location: LocationConfig = LocationConfig()
    quota: QuotaConfig = QuotaConfig()
    ops: OpsConfig = OpsConfig()
