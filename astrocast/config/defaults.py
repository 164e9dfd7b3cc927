"""Fixed values reported in simulated mode."""

from astrocast.models.forecast import WeatherValues

SIMULATED_VALUES = WeatherValues(
    cloud_cover=50.0,
    temperature=20.0,
    wind_speed=10.0,
    dew_point=10.0,
    wind_direction=180.0,
    seeing=2.5,
    transparency=15.0,
)
