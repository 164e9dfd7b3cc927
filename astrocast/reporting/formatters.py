"""Output formatters for tick results."""

import json

from astrocast.models.forecast import CRITICAL_PARAMETER, WeatherValues
from astrocast.models.status import TickResult


def format_weather_summary(v: WeatherValues) -> str:
    """One-line weather summary shown next to the published parameters."""
    return (
        f"Cloud: {v.cloud_cover:.2f}%, Temp: {v.temperature:.2f}C, "
        f"Wind: {v.wind_speed:.2f}kph, Dew: {v.dew_point:.2f}C, "
        f"Dir: {v.wind_direction:.2f}°, See: {v.seeing:.2f}, "
        f"Trans: {v.transparency:.2f}"
    )


def format_tick_text(r: TickResult) -> str:
    """Plain text tick report for the terminal."""
    lines = [f"Status: {r.status.value} ({r.state.value})"]
    if r.cause is not None:
        lines.append(f"Cause: {r.cause.value}")
    if r.hour_offset is not None:
        lines.append(f"Forecast hour: {r.hour_offset}")
    if r.values is not None:
        for name, value in r.values.as_dict().items():
            marker = " (critical)" if name == CRITICAL_PARAMETER else ""
            lines.append(f"  {name}: {value:.2f}{marker}")
    if r.summary:
        lines.append(r.summary)
    return "\n".join(lines)


def format_tick_json(r: TickResult) -> str:
    """JSON tick report for programmatic consumption."""
    data = {
        "status": r.status.value,
        "state": r.state.value,
        "cause": r.cause.value if r.cause is not None else None,
        "hour_offset": r.hour_offset,
        "fetched": r.fetched,
        "values": r.values.as_dict() if r.values is not None else None,
        "critical_parameter": CRITICAL_PARAMETER,
        "critical_value": (
            r.values.as_dict()[CRITICAL_PARAMETER] if r.values is not None else None
        ),
        "summary": r.summary,
    }
    return json.dumps(data, indent=2)
