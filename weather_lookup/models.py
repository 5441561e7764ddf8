from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Union

from .config import settings


class PayloadError(ValueError):
    """Raised when a response body does not match the current-weather schema."""


def _field(obj: Any, key: str, path: str) -> Any:
    if not isinstance(obj, dict):
        raise PayloadError(f"expected an object at '{path}'")
    if key not in obj:
        raise PayloadError(f"missing field '{path}.{key}'" if path else f"missing field '{key}'")
    return obj[key]


def _number(value: Any, name: str) -> float:
    # bool is an int subclass; JSON true/false is not a temperature.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PayloadError(f"'{name}' must be a number, got {type(value).__name__}")
    try:
        return float(value)
    except OverflowError as e:
        raise PayloadError(f"'{name}' is out of range") from e


def _integer(value: Any, name: str) -> int:
    # 45.0 is accepted as 45; 45.5 is not.
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise PayloadError(f"'{name}' must be an integer, got {type(value).__name__}")
    return value


def _text(value: Any, name: str) -> str:
    if not isinstance(value, str):
        raise PayloadError(f"'{name}' must be a string, got {type(value).__name__}")
    return value


def icon_url(icon: str, base_url: str | None = None) -> str:
    """Return the 2x PNG URL for an OpenWeatherMap icon identifier."""
    base = (base_url or settings.icon_base_url).rstrip("/")
    return f"{base}/{icon}@2x.png"


@dataclass(frozen=True)
class WeatherRecord:
    """Current conditions for one location, as reported by the provider.

    Values are kept in provider units (``units=imperial``), no conversion
    is applied.
    """

    name: str
    temp: float
    feels_like: float
    humidity: int
    description: str
    icon: str

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "WeatherRecord":
        main = _field(payload, "main", "")
        conditions = _field(payload, "weather", "")
        if not isinstance(conditions, list):
            raise PayloadError("'weather' must be an array")
        if not conditions:
            raise PayloadError("'weather' array is empty")
        first = conditions[0]

        return cls(
            name=_text(_field(payload, "name", ""), "name"),
            temp=_number(_field(main, "temp", "main"), "main.temp"),
            feels_like=_number(_field(main, "feels_like", "main"), "main.feels_like"),
            humidity=_integer(_field(main, "humidity", "main"), "main.humidity"),
            description=_text(_field(first, "description", "weather[0]"), "weather[0].description"),
            icon=_text(_field(first, "icon", "weather[0]"), "weather[0].icon"),
        )

    @property
    def icon_url(self) -> str:
        return icon_url(self.icon)


@dataclass(frozen=True)
class Idle:
    """No lookup has been submitted yet."""


@dataclass(frozen=True)
class Loading:
    """A lookup is in flight."""


@dataclass(frozen=True)
class Success:
    record: WeatherRecord


@dataclass(frozen=True)
class Failure:
    reason: str


RequestState = Union[Idle, Loading, Success, Failure]

IDLE = Idle()
LOADING = Loading()
