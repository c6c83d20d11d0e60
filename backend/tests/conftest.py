"""
Shared test fixtures for the weather proxy test suite.

Provides:
- a controllable clock for TTL tests
- OpenWeatherMap payload factories
- an AppState wired to the bundled city list and a mocked upstream client
- an async FastAPI test client (no network, no lifespan)
"""

import os
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

# Ensure test env vars before any app imports
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("OPENWEATHER_API_KEY", "test-key-123")

from config import DEFAULT_CITY_DB  # noqa: E402
from models import WeatherResponse  # noqa: E402
from services.cache import CacheStore  # noqa: E402
from services.locations import LocationResolver  # noqa: E402
from services.weather import OpenWeatherClient  # noqa: E402
from state import AppState  # noqa: E402

TTL_S = 600.0


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_current_payload(temp: float = 21.5, main: str = "Clear") -> dict[str, Any]:
    """Factory for a One Call response with only the current section."""
    return {
        "lat": 40.4168,
        "lon": -3.7038,
        "timezone": "Europe/Madrid",
        "timezone_offset": 7200,
        "current": {
            "dt": 1760781600,
            "sunrise": 1760768123,
            "sunset": 1760808456,
            "temp": temp,
            "feels_like": temp - 0.8,
            "pressure": 1016,
            "humidity": 48,
            "dew_point": 10.1,
            "uvi": 3.2,
            "clouds": 0,
            "visibility": 10000,
            "wind_speed": 3.6,
            "wind_deg": 220,
            "weather": [{"id": 800, "main": main, "description": "clear sky", "icon": "01d"}],
        },
    }


def make_forecast_payload(hours: int = 3) -> dict[str, Any]:
    """Factory for a One Call response with only the hourly section."""
    return {
        "lat": 40.4168,
        "lon": -3.7038,
        "timezone": "Europe/Madrid",
        "hourly": [
            {
                "dt": 1760781600 + 3600 * i,
                "temp": 20.0 + i,
                "feels_like": 19.5 + i,
                "pressure": 1015,
                "humidity": 50,
                "dew_point": 9.8,
                "uvi": 2.0,
                "clouds": 20,
                "visibility": 10000,
                "wind_speed": 4.1,
                "wind_deg": 210,
                "weather": [{"id": 801, "main": "Clouds", "description": "few clouds"}],
                "pop": 0.1,
            }
            for i in range(hours)
        ],
    }


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def resolver():
    return LocationResolver.from_file(DEFAULT_CITY_DB)


@pytest.fixture
def current_response():
    return WeatherResponse.model_validate(make_current_payload())


@pytest.fixture
def upstream(current_response):
    """Mock OpenWeatherClient returning a fixed current-weather payload."""
    client = MagicMock(spec=OpenWeatherClient)
    client.fetch = AsyncMock(return_value=current_response)
    return client


@pytest.fixture
def app_state(clock, resolver, upstream):
    return AppState(
        cache=CacheStore(ttl=TTL_S, clock=clock),
        client=upstream,
        resolver=resolver,
    )


@pytest.fixture
async def client(app_state):
    """Async HTTP client against the app with mocked state injected."""
    from app import app as _app

    _app.state.weather = app_state
    async with AsyncClient(transport=ASGITransport(app=_app), base_url="http://test") as ac:
        yield ac
