"""Query types and the normalized weather payload.

The response models accept the OpenWeatherMap One Call JSON directly
(``weather[].main`` is read into ``conditions[].condition``) and serialize
under our own field names, dropping anything the provider did not send.
"""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from errors import InvalidUnitsError


class Units(str, Enum):
    CELSIUS = "C"
    FAHRENHEIT = "F"
    KELVIN = "K"

    @classmethod
    def parse(cls, raw: str) -> "Units":
        """Accept C/F/K or the long names, case-insensitively."""
        value = _UNIT_ALIASES.get(raw.strip().lower())
        if value is None:
            raise InvalidUnitsError(raw)
        return value

    @property
    def provider_units(self) -> str:
        return _PROVIDER_UNITS[self]


_UNIT_ALIASES = {
    "c": Units.CELSIUS,
    "celsius": Units.CELSIUS,
    "f": Units.FAHRENHEIT,
    "fahrenheit": Units.FAHRENHEIT,
    "k": Units.KELVIN,
    "kelvin": Units.KELVIN,
}

_PROVIDER_UNITS = {
    Units.CELSIUS: "metric",
    Units.FAHRENHEIT: "imperial",
    Units.KELVIN: "standard",
}


class QueryKind(str, Enum):
    CURRENT = "current"
    FORECAST = "forecast"


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lon: float


@dataclass(frozen=True)
class Location:
    city_id: int
    name: str
    country: str
    coordinates: Coordinates


@dataclass(frozen=True)
class WeatherQuery:
    """Parsed inbound request. ``units`` is validated by the orchestrator."""

    location: str
    units: str
    kind: QueryKind


class _Payload(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class WeatherCondition(_Payload):
    condition: str = Field(validation_alias="main")
    description: str


class WeatherCurrent(_Payload):
    dt: int
    sunrise: int | None = None
    sunset: int | None = None
    temp: float
    feels_like: float
    pressure: int
    humidity: int
    dew_point: float | None = None
    uvi: float | None = None
    clouds: int | None = None
    visibility: int | None = None
    wind_speed: float
    wind_deg: int | None = None
    conditions: list[WeatherCondition] | None = Field(default=None, validation_alias="weather")


class WeatherHourly(_Payload):
    dt: int
    temp: float
    feels_like: float
    pressure: int
    humidity: int
    dew_point: float | None = None
    uvi: float | None = None
    clouds: int | None = None
    visibility: int | None = None
    wind_speed: float
    wind_deg: int | None = None
    conditions: list[WeatherCondition] | None = Field(default=None, validation_alias="weather")
    pop: float = 0.0


class WeatherResponse(_Payload):
    lat: float | None = None
    lon: float | None = None
    timezone: str | None = None
    current: WeatherCurrent | None = None
    hourly: list[WeatherHourly] | None = None

    @property
    def has_data(self) -> bool:
        return self.current is not None or self.hourly is not None
