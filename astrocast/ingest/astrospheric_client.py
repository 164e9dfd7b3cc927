"""Astrospheric forecast API client. One POST per call, no retries."""

import logging

import httpx

from astrocast.config.location import Location

logger = logging.getLogger(__name__)

ASTROSPHERIC_BASE_URL = "https://astrosphericpublicaccess.azurewebsites.net"
FORECAST_ENDPOINT = "/api/GetForecastData_V1"
DEFAULT_USER_AGENT = "astrocast/0.1.0"


class AstrosphericClient:
    def __init__(
        self,
        base_url: str = ASTROSPHERIC_BASE_URL,
        endpoint: str = FORECAST_ENDPOINT,
        user_agent: str = DEFAULT_USER_AGENT,
        connect_timeout: float = 5.0,
        read_timeout: float = 15.0,
    ):
        self.base_url = base_url
        self.endpoint = endpoint
        self.user_agent = user_agent
        self.timeout = httpx.Timeout(read_timeout, connect=connect_timeout)

    def get_forecast(self, location: Location, api_key: str) -> bytes:
        """POST the site coordinates and return the raw response body.

        Raises httpx.HTTPError on connection failure, timeout or a
        non-200 status.
        """
        lat, lon = location.for_provider()
        logger.debug(
            "Sending coordinates to API: Latitude=%.4f, Longitude=%.4f", lat, lon
        )
        payload = {"Latitude": lat, "Longitude": lon, "APIKey": api_key}
        url = f"{self.base_url}{self.endpoint}"
        resp = httpx.post(
            url,
            json=payload,
            headers={"User-Agent": self.user_agent},
            timeout=self.timeout,
        )
        if resp.status_code != 200:
            logger.error(
                "API request failed: %d - %s", resp.status_code, resp.text[:200]
            )
            resp.raise_for_status()
            # Other 2xx codes pass raise_for_status but carry no forecast
            raise httpx.HTTPStatusError(
                f"Unexpected status {resp.status_code}",
                request=resp.request,
                response=resp,
            )
        return resp.content
