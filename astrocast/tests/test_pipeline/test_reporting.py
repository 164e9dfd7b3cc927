"""Tests for tick result formatters."""

import json

from astrocast.config.defaults import SIMULATED_VALUES
from astrocast.models.common import FailureKind
from astrocast.models.status import DeviceStatus, SchedulerState, TickResult
from astrocast.reporting.formatters import (
    format_tick_json,
    format_tick_text,
    format_weather_summary,
)


def _ok_result() -> TickResult:
    return TickResult(
        status=DeviceStatus.OK,
        state=SchedulerState.VALID,
        values=SIMULATED_VALUES,
        hour_offset=4,
        fetched=True,
        summary=format_weather_summary(SIMULATED_VALUES),
    )


class TestWeatherSummary:
    def test_format(self):
        assert format_weather_summary(SIMULATED_VALUES) == (
            "Cloud: 50.00%, Temp: 20.00C, Wind: 10.00kph, Dew: 10.00C, "
            "Dir: 180.00°, See: 2.50, Trans: 15.00"
        )


class TestTickText:
    def test_ok(self):
        text = format_tick_text(_ok_result())
        assert "Status: Ok (valid)" in text
        assert "Forecast hour: 4" in text
        assert "WEATHER_CLOUD_COVER: 50.00" in text

    def test_alert(self):
        r = TickResult(
            status=DeviceStatus.ALERT,
            state=SchedulerState.ALERT,
            cause=FailureKind.NO_CREDENTIAL,
        )
        text = format_tick_text(r)
        assert "Status: Alert" in text
        assert "Cause: NoCredential" in text


class TestTickJson:
    def test_fields(self):
        data = json.loads(format_tick_json(_ok_result()))
        assert data["status"] == "Ok"
        assert data["cause"] is None
        assert data["hour_offset"] == 4
        assert data["fetched"] is True
        assert data["values"]["WEATHER_TRANSPARENCY"] == 15.0
        assert len(data["values"]) == 7

    def test_no_values(self):
        r = TickResult(status=DeviceStatus.IDLE, state=SchedulerState.IDLE)
        data = json.loads(format_tick_json(r))
        assert data["values"] is None

    def test_critical_parameter(self):
        data = json.loads(format_tick_json(_ok_result()))
        assert data["critical_parameter"] == "WEATHER_CLOUD_COVER"
        assert data["critical_value"] == 50.0

    def test_critical_value_absent_without_values(self):
        r = TickResult(status=DeviceStatus.BUSY, state=SchedulerState.FETCHING)
        data = json.loads(format_tick_json(r))
        assert data["critical_parameter"] == "WEATHER_CLOUD_COVER"
        assert data["critical_value"] is None
