"""Scheduler state and per-tick result models."""

from dataclasses import dataclass
from enum import StrEnum

from astrocast.models.common import FailureKind
from astrocast.models.forecast import WeatherValues


class SchedulerState(StrEnum):
    IDLE = "idle"
    FETCHING = "fetching"
    VALID = "valid"
    ALERT = "alert"


class DeviceStatus(StrEnum):
    OK = "Ok"
    BUSY = "Busy"
    ALERT = "Alert"
    IDLE = "Idle"


STATUS_FOR_STATE: dict[SchedulerState, DeviceStatus] = {
    SchedulerState.IDLE: DeviceStatus.IDLE,
    SchedulerState.FETCHING: DeviceStatus.BUSY,
    SchedulerState.VALID: DeviceStatus.OK,
    SchedulerState.ALERT: DeviceStatus.ALERT,
}


@dataclass(frozen=True)
class TickResult:
    status: DeviceStatus
    state: SchedulerState
    values: WeatherValues | None = None  # last good values, frozen on Alert
    cause: FailureKind | None = None
    hour_offset: int | None = None
    fetched: bool = False
    summary: str = ""
