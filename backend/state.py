"""Process-wide state shared by every request handler."""

import logging
from dataclasses import dataclass

import httpx
from fastapi import Request

from config import Settings
from models import WeatherResponse
from services.cache import CacheStore
from services.locations import LocationResolver
from services.weather import OpenWeatherClient

logger = logging.getLogger(__name__)


@dataclass
class AppState:
    cache: CacheStore[WeatherResponse]
    client: OpenWeatherClient
    resolver: LocationResolver
    http: httpx.AsyncClient | None = None

    @classmethod
    def build(cls, settings: Settings) -> "AppState":
        """Wire up state from settings. Raises if required config is missing."""
        missing = settings.validate()
        if missing:
            raise RuntimeError(f"Missing required env vars: {', '.join(missing)}")

        resolver = LocationResolver.from_file(settings.city_db_path)
        http = httpx.AsyncClient(timeout=settings.upstream_timeout_s)
        client = OpenWeatherClient(
            api_key=settings.openweather_api_key,
            http_client=http,
            base_url=settings.openweather_base_url,
            timeout=settings.upstream_timeout_s,
        )
        logger.info(
            "Upstream %s (timeout %.1fs), cache ttl %.0fs",
            settings.openweather_base_url,
            settings.upstream_timeout_s,
            settings.cache_ttl_s,
        )
        return cls(
            cache=CacheStore(ttl=settings.cache_ttl_s),
            client=client,
            resolver=resolver,
            http=http,
        )

    async def aclose(self) -> None:
        await self.cache.aclose()
        if self.http is not None:
            await self.http.aclose()


def get_state(request: Request) -> AppState:
    """FastAPI dependency returning the state built at startup."""
    return request.app.state.weather
