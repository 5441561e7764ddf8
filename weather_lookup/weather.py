from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional
from urllib.parse import quote, urlencode

import requests

from .config import settings
from .models import WeatherRecord


class WeatherAPIError(Exception):
    """Raised when the weather API call fails."""


class MissingAPIKeyError(WeatherAPIError):
    """No provider API key is configured."""


class InvalidInputError(WeatherAPIError):
    """The city name cannot be percent-encoded into a query string."""


class TransportError(WeatherAPIError):
    """The HTTP request did not complete (DNS, connection, TLS, timeout...)."""


class EmptyResponseError(WeatherAPIError):
    """The provider answered with an empty body."""


class ProviderError(WeatherAPIError):
    """The provider answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"Weather API error {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class DecodeError(WeatherAPIError):
    """The body is not JSON or does not match the current-weather schema."""


CompletionCallback = Callable[[Optional[WeatherRecord], Optional[BaseException]], None]


def _redact(text: str, secret: str) -> str:
    """Mask the API key, raw or percent-encoded, wherever it appears in ``text``."""
    for form in (quote(secret, safe=""), secret):
        text = text.replace(form, "***")
    return text


def _provider_message(response: requests.Response) -> str:
    # OpenWeatherMap error bodies look like {"cod": "404", "message": "city not found"}
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        return body["message"]
    return response.text


@dataclass
class WeatherClient:
    """OpenWeatherMap current-weather client.

    ``fetch`` performs exactly one GET and either returns a
    :class:`WeatherRecord` or raises a :class:`WeatherAPIError` subclass.
    ``fetch_async`` runs the same call on a worker thread and reports the
    outcome through a callback.
    """

    base_url: str = field(default_factory=lambda: settings.base_url)
    units: str = "imperial"
    timeout: Optional[float] = field(default_factory=lambda: settings.request_timeout)
    max_workers: int = 4
    _executor: Optional[ThreadPoolExecutor] = field(default=None, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def _api_key(self) -> str:
        if not settings.openweather_api_key:
            raise MissingAPIKeyError("OPENWEATHER_API_KEY is not set.")
        return settings.openweather_api_key

    def build_url(self, city: str) -> str:
        params = {"q": city, "appid": self._api_key(), "units": self.units}
        try:
            query = urlencode(params, quote_via=quote)
        except UnicodeEncodeError as e:
            raise InvalidInputError(f"City name cannot be encoded: {city!r}") from e
        return f"{self.base_url}?{query}"

    def fetch(self, city: str) -> WeatherRecord:
        url = self.build_url(city)
        api_key = self._api_key()
        logging.debug("Requesting current weather for %r", city)

        try:
            response = requests.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            # requests echoes the full URL, appid included, in its messages.
            message = _redact(str(e), api_key)
            logging.warning("Weather request for %r failed: %s", city, message)
            raise TransportError(message) from e

        if not response.content:
            logging.warning("Weather request for %r returned an empty body", city)
            raise EmptyResponseError("No data received")

        if not 200 <= response.status_code < 300:
            message = _provider_message(response)
            logging.warning("Weather API returned %s for %r: %s", response.status_code, city, message)
            raise ProviderError(response.status_code, message)

        try:
            payload: Dict[str, Any] = response.json()
            return WeatherRecord.from_payload(payload)
        except ValueError as e:  # includes PayloadError and JSON syntax errors
            logging.warning("Could not decode weather response for %r: %s", city, e)
            raise DecodeError(str(e)) from e

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.max_workers, thread_name_prefix="weather-fetch"
                )
            return self._executor

    def fetch_async(self, city: str, on_done: CompletionCallback) -> Future:
        """Start ``fetch(city)`` in the background and return immediately.

        ``on_done(record, error)`` is called exactly once from the worker
        thread, with exactly one of the two arguments set. The client holds
        no reference to the caller other than the callback itself.
        """

        def _complete(future: Future) -> None:
            error = future.exception()
            if error is None:
                on_done(future.result(), None)
                return
            if not isinstance(error, WeatherAPIError):
                logging.error("Unexpected error while fetching weather for %r", city, exc_info=error)
            on_done(None, error)

        future = self._get_executor().submit(self.fetch, city)
        future.add_done_callback(_complete)
        return future

    def close(self) -> None:
        """Shut down the worker pool; in-flight requests still complete."""
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=False)
