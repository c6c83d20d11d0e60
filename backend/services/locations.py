"""Static city database: "City,CC" query strings to coordinates.

The city list is a JSON array of ``{"id", "name", "ctry", "lat", "lon"}``
records, loaded once at startup. Lookups are case-insensitive.
"""

import json
import logging
from pathlib import Path

from errors import UnknownLocationError
from models import Coordinates, Location

logger = logging.getLogger(__name__)


def parse_location_query(query: str) -> tuple[str, str]:
    """Split "City,CC" into (name, country). Anything else is unknown."""
    parts = [part.strip() for part in query.split(",")]
    if len(parts) != 2 or not all(parts):
        raise UnknownLocationError(query)
    return parts[0], parts[1]


class LocationResolver:
    def __init__(self, locations: list[Location]):
        self._by_name: dict[tuple[str, str], Location] = {}
        for location in locations:
            key = (location.name.casefold(), location.country.casefold())
            if key in self._by_name:
                logger.warning(
                    "Duplicate city %s,%s (id %d) ignored",
                    location.name,
                    location.country,
                    location.city_id,
                )
                continue
            self._by_name[key] = location

    def __len__(self) -> int:
        return len(self._by_name)

    @classmethod
    def from_records(cls, records: list[dict]) -> "LocationResolver":
        return cls(
            [
                Location(
                    city_id=int(r["id"]),
                    name=r["name"],
                    country=r["ctry"],
                    coordinates=Coordinates(lat=float(r["lat"]), lon=float(r["lon"])),
                )
                for r in records
            ]
        )

    @classmethod
    def from_file(cls, path: Path) -> "LocationResolver":
        with open(path, encoding="utf-8") as f:
            records = json.load(f)
        resolver = cls.from_records(records)
        logger.info("Loaded %d cities from %s", len(resolver), path)
        return resolver

    def resolve(self, name: str, country: str) -> Location:
        location = self._by_name.get((name.casefold(), country.casefold()))
        if location is None:
            raise UnknownLocationError(f"{name},{country}")
        return location

    def resolve_query(self, query: str) -> Location:
        name, country = parse_location_query(query)
        return self.resolve(name, country)
