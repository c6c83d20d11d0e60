"""OpenWeatherMap One Call client.

One request per call, no retries. httpx only bounds each connect or read
phase, so the whole request including the body read also runs under an
overall deadline. Every failure is raised as an UpstreamError subclass.
"""

import asyncio
import logging

import httpx
from pydantic import ValidationError

from errors import (
    UpstreamRateLimited,
    UpstreamTimeout,
    UpstreamTransportError,
    UpstreamUnexpected,
)
from models import Coordinates, QueryKind, Units, WeatherResponse

logger = logging.getLogger(__name__)

# Sections of the One Call payload dropped per query kind
EXCLUDE = {
    QueryKind.CURRENT: "minutely,hourly,daily,alerts",
    QueryKind.FORECAST: "current,minutely,daily,alerts",
}


class OpenWeatherClient:
    def __init__(
        self,
        api_key: str,
        http_client: httpx.AsyncClient,
        base_url: str,
        timeout: float = 10.0,
    ):
        self._api_key = api_key
        self._http = http_client
        self._base_url = base_url
        self._timeout = timeout

    async def fetch_current(self, coords: Coordinates, units: Units) -> WeatherResponse:
        return await self._query(coords, units, QueryKind.CURRENT)

    async def fetch_forecast(self, coords: Coordinates, units: Units) -> WeatherResponse:
        return await self._query(coords, units, QueryKind.FORECAST)

    async def fetch(self, coords: Coordinates, units: Units, kind: QueryKind) -> WeatherResponse:
        if kind is QueryKind.FORECAST:
            return await self.fetch_forecast(coords, units)
        return await self.fetch_current(coords, units)

    async def _query(self, coords: Coordinates, units: Units, kind: QueryKind) -> WeatherResponse:
        logger.debug("Querying OpenWeatherMap %s for (%s,%s)", kind.value, coords.lat, coords.lon)
        try:
            resp = await asyncio.wait_for(
                self._http.get(
                    self._base_url,
                    params={
                        "appid": self._api_key,
                        "lat": coords.lat,
                        "lon": coords.lon,
                        "exclude": EXCLUDE[kind],
                        "units": units.provider_units,
                    },
                ),
                self._timeout,
            )
        except asyncio.TimeoutError as e:
            raise UpstreamTimeout(f"no complete response within {self._timeout}s") from e
        except httpx.TimeoutException as e:
            raise UpstreamTimeout(str(e) or type(e).__name__) from e
        except httpx.TransportError as e:
            raise UpstreamTransportError(str(e) or type(e).__name__) from e

        if resp.status_code == 429:
            raise UpstreamRateLimited(_error_message(resp))
        if resp.is_error:
            raise UpstreamUnexpected(f"HTTP {resp.status_code}: {_error_message(resp)}")

        try:
            data = WeatherResponse.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            raise UpstreamUnexpected(f"Malformed payload: {e}") from e

        if not data.has_data:
            raise UpstreamUnexpected("Response contains neither current nor hourly data")
        return data


def _error_message(resp: httpx.Response) -> str:
    """Pull the provider's error message out of an error body, if any."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:300]
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return resp.text[:300]
