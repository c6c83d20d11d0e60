"""Centralized configuration — all env vars in one place."""

import os
from pathlib import Path

DEFAULT_CITY_DB = Path(__file__).parent / "data" / "cities.json"


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        self.cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
        self.git_sha: str = os.getenv("GIT_SHA", "unknown")
        self.environment: str = os.getenv("ENVIRONMENT", "local")
        self.host: str = os.getenv("HOST", "localhost")
        self.port: int = int(os.getenv("PORT", "8080"))

        # OpenWeatherMap
        self.openweather_api_key: str | None = os.getenv("OPENWEATHER_API_KEY")
        self.openweather_base_url: str = os.getenv(
            "OPENWEATHER_BASE_URL", "https://api.openweathermap.org/data/2.5/onecall"
        )
        self.upstream_timeout_s: float = float(os.getenv("UPSTREAM_TIMEOUT_S", "10"))

        # Cache freshness window, 10 minutes by default
        self.cache_ttl_s: float = float(os.getenv("CACHE_TTL_S", "600"))

        self.city_db_path: Path = Path(os.getenv("CITY_DB_PATH", str(DEFAULT_CITY_DB)))

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def validate(self) -> list[str]:
        """Return list of missing required env vars."""
        required = ["OPENWEATHER_API_KEY"]
        return [var for var in required if not getattr(self, var.lower())]


settings = Settings()
