"""
Tests for get_weather: validation order, cache keying and TTL behaviour
with a mocked upstream client.
"""

import pytest

from conftest import TTL_S
from errors import InvalidUnitsError, UnknownLocationError, UpstreamTimeout
from models import Coordinates, QueryKind, Units, WeatherQuery
from services.cache import CacheKey
from services.orchestrator import get_weather

MADRID = Coordinates(40.416775, -3.70379)


def _query(location="Madrid,ES", units="C", kind=QueryKind.CURRENT) -> WeatherQuery:
    return WeatherQuery(location=location, units=units, kind=kind)


class TestUnits:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("C", Units.CELSIUS),
            ("c", Units.CELSIUS),
            ("Celsius", Units.CELSIUS),
            ("F", Units.FAHRENHEIT),
            ("fahrenheit", Units.FAHRENHEIT),
            ("K", Units.KELVIN),
            ("KELVIN", Units.KELVIN),
        ],
    )
    def test_parse(self, raw, expected):
        assert Units.parse(raw) is expected

    @pytest.mark.parametrize("raw", ["", "X", "metric", "rankine"])
    def test_parse_rejects(self, raw):
        with pytest.raises(InvalidUnitsError):
            Units.parse(raw)


class TestGetWeather:
    async def test_madrid_scenario(self, app_state, upstream, current_response):
        result = await get_weather(app_state, _query())

        assert result == current_response
        upstream.fetch.assert_awaited_once_with(MADRID, Units.CELSIUS, QueryKind.CURRENT)
        cached = app_state.cache.peek(CacheKey(MADRID, Units.CELSIUS, QueryKind.CURRENT))
        assert cached.payload == current_response

        # Same query within ttl: served from cache
        again = await get_weather(app_state, _query())
        assert again == current_response
        assert upstream.fetch.await_count == 1

        # Different units: different key, new upstream call
        await get_weather(app_state, _query(units="F"))
        assert upstream.fetch.await_count == 2
        upstream.fetch.assert_awaited_with(MADRID, Units.FAHRENHEIT, QueryKind.CURRENT)

    async def test_unit_aliases_share_cache_entry(self, app_state, upstream):
        await get_weather(app_state, _query(units="C"))
        await get_weather(app_state, _query(units="celsius"))
        await get_weather(app_state, _query(location="madrid, es", units="c"))

        assert upstream.fetch.await_count == 1

    async def test_forecast_and_current_cached_separately(self, app_state, upstream):
        await get_weather(app_state, _query(kind=QueryKind.CURRENT))
        await get_weather(app_state, _query(kind=QueryKind.FORECAST))

        assert upstream.fetch.await_count == 2
        assert len(app_state.cache) == 2

    async def test_ttl_expiry_triggers_one_new_fetch(self, app_state, upstream, clock):
        await get_weather(app_state, _query())
        clock.advance(TTL_S + 1)

        await get_weather(app_state, _query())
        await get_weather(app_state, _query())

        assert upstream.fetch.await_count == 2

    async def test_invalid_units_rejected_before_any_work(self, app_state, upstream):
        with pytest.raises(InvalidUnitsError):
            await get_weather(app_state, _query(location="Atlantis,XX", units="X"))

        upstream.fetch.assert_not_awaited()
        assert app_state.cache.stats.misses == 0

    async def test_unknown_location(self, app_state, upstream):
        with pytest.raises(UnknownLocationError):
            await get_weather(app_state, _query(location="Atlantis,XX"))

        upstream.fetch.assert_not_awaited()
        assert len(app_state.cache) == 0

    async def test_upstream_error_propagates_unchanged(self, app_state, upstream, current_response):
        error = UpstreamTimeout("read timeout")
        upstream.fetch.side_effect = [error, current_response]

        with pytest.raises(UpstreamTimeout) as exc_info:
            await get_weather(app_state, _query())
        assert exc_info.value is error
        assert len(app_state.cache) == 0

        assert await get_weather(app_state, _query()) == current_response
        assert upstream.fetch.await_count == 2
