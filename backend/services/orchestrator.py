"""Turns a parsed weather query into a cached upstream result."""

import logging

from models import Units, WeatherQuery, WeatherResponse
from services.cache import CacheKey
from state import AppState

logger = logging.getLogger(__name__)


async def get_weather(state: AppState, query: WeatherQuery) -> WeatherResponse:
    """Validate, resolve and serve a query through the shared cache.

    Raises InvalidUnitsError before any lookup, UnknownLocationError when
    the city is not in the database, and the client's UpstreamError
    subclasses unchanged when the fetch fails.
    """
    units = Units.parse(query.units)
    location = state.resolver.resolve_query(query.location)
    key = CacheKey(location.coordinates, units, query.kind)

    async def fetch() -> WeatherResponse:
        logger.info("Fetching %s weather for %s,%s", query.kind.value, location.name, location.country)
        return await state.client.fetch(location.coordinates, units, query.kind)

    return await state.cache.get_or_fetch(key, fetch)
