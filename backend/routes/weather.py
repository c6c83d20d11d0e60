"""Weather routes — current conditions and hourly forecast for a city.

GET /weather?city_query=Madrid,ES&units=C
GET /forecast?city_query=Madrid,ES&units=F
"""

from fastapi import APIRouter, Depends, Query

from models import QueryKind, WeatherQuery, WeatherResponse
from services.orchestrator import get_weather
from state import AppState, get_state

router = APIRouter()


def _success(payload: WeatherResponse) -> dict:
    return {"success": True, "data": payload.model_dump(exclude_none=True)}


@router.get("/weather")
async def current_weather(
    city_query: str = Query(..., description='City and ISO country code, e.g. "Madrid,ES"'),
    units: str = Query(..., description="C, F or K"),
    state: AppState = Depends(get_state),
) -> dict:
    """Current conditions for a city."""
    payload = await get_weather(state, WeatherQuery(city_query, units, QueryKind.CURRENT))
    return _success(payload)


@router.get("/forecast")
async def forecast(
    city_query: str = Query(..., description='City and ISO country code, e.g. "Madrid,ES"'),
    units: str = Query(..., description="C, F or K"),
    state: AppState = Depends(get_state),
) -> dict:
    """Hourly forecast for a city."""
    payload = await get_weather(state, WeatherQuery(city_query, units, QueryKind.FORECAST))
    return _success(payload)
