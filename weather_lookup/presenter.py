from __future__ import annotations

import logging
from typing import Callable, List, Optional

from .dispatch import CallQueue, Dispatcher
from .models import IDLE, LOADING, Failure, RequestState, Success, WeatherRecord
from .weather import (
    DecodeError,
    EmptyResponseError,
    InvalidInputError,
    ProviderError,
    WeatherAPIError,
    WeatherClient,
)

Listener = Callable[[RequestState], None]

GENERIC_FAILURE = "Weather lookup failed"


def failure_message(error: BaseException) -> str:
    """Collapse a client failure into the single line shown to the user."""
    if isinstance(error, InvalidInputError):
        return "Invalid city name"
    if isinstance(error, EmptyResponseError):
        return "No data received"
    if isinstance(error, DecodeError):
        return "Failed to decode weather data"
    if isinstance(error, ProviderError):
        return error.message or GENERIC_FAILURE
    if isinstance(error, WeatherAPIError):
        return str(error) or GENERIC_FAILURE
    return GENERIC_FAILURE


class WeatherPresenter:
    """View-model behind the weather screen.

    Owns the :data:`RequestState` shown by the UI. All state changes happen
    on the rendering context: ``submit`` is called there, and network
    completions are posted back through ``dispatcher`` before they touch
    state. Each submission gets a generation number; a completion whose
    generation is no longer current is dropped, so the latest submission
    always wins.

    Without an explicit ``dispatcher`` the presenter queues completions on
    its own :class:`CallQueue`; the rendering thread applies them by calling
    :meth:`run_pending`.
    """

    def __init__(
        self,
        client: Optional[WeatherClient] = None,
        dispatcher: Optional[Dispatcher] = None,
    ) -> None:
        self._client = client or WeatherClient()
        self._calls: Optional[CallQueue] = None
        if dispatcher is None:
            self._calls = CallQueue()
            dispatcher = self._calls.post
        self._dispatch = dispatcher
        self._state: RequestState = IDLE
        self._listeners: List[Listener] = []
        self._generation = 0
        self._closed = False

    @property
    def state(self) -> RequestState:
        return self._state

    def run_pending(self, timeout: float | None = None) -> int:
        """Apply queued completions on the calling (rendering) thread."""
        if self._calls is None:
            return 0
        return self._calls.run_pending(timeout=timeout)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _set_state(self, state: RequestState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    def submit(self, city: str) -> None:
        city = (city or "").strip()
        if not city or self._closed:
            return

        self._generation += 1
        generation = self._generation
        self._set_state(LOADING)

        def _on_done(record: Optional[WeatherRecord], error: Optional[BaseException]) -> None:
            self._dispatch(lambda: self._complete(generation, record, error))

        self._client.fetch_async(city, _on_done)

    def _complete(
        self,
        generation: int,
        record: Optional[WeatherRecord],
        error: Optional[BaseException],
    ) -> None:
        if self._closed or generation != self._generation:
            logging.debug("Dropping stale weather completion (generation %s)", generation)
            return
        if record is not None:
            self._set_state(Success(record))
        else:
            self._set_state(Failure(failure_message(error) if error else GENERIC_FAILURE))

    def close(self) -> None:
        """Detach from the UI; completions still in flight are ignored."""
        self._closed = True
        self._listeners.clear()
