from __future__ import annotations

import os
from dotenv import load_dotenv
from dataclasses import dataclass


DEFAULT_BASE_URL = "https://api.openweathermap.org/data/2.5/weather"
DEFAULT_ICON_BASE_URL = "https://openweathermap.org/img/wn"


def _optional_float(name: str) -> float | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    try:
        return float(value)
    except ValueError as e:
        raise ValueError(f"{name} must be a number of seconds, got {value!r}") from e


@dataclass
class Settings:
    """Application configuration loaded from environment variables."""

    openweather_api_key: str | None
    base_url: str
    icon_base_url: str
    request_timeout: float | None
    log_level: str

    @classmethod
    def load(cls) -> "Settings":
        # Load .env file if present (no-op if not)
        load_dotenv()

        return cls(
            openweather_api_key=os.getenv("OPENWEATHER_API_KEY"),
            base_url=os.getenv("OPENWEATHER_BASE_URL", DEFAULT_BASE_URL),
            icon_base_url=os.getenv("OPENWEATHER_ICON_BASE_URL", DEFAULT_ICON_BASE_URL),
            # Unset means the transport default (no timeout).
            request_timeout=_optional_float("WEATHER_REQUEST_TIMEOUT"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


settings = Settings.load()
