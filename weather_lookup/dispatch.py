from __future__ import annotations

import logging
import queue
from typing import Callable

Dispatcher = Callable[[Callable[[], None]], None]


def run_inline(fn: Callable[[], None]) -> None:
    """Dispatcher that runs the callable on whichever thread posted it."""
    fn()


class CallQueue:
    """Hands callables from worker threads to the rendering thread.

    Workers call :meth:`post`; the thread that owns the UI calls
    :meth:`run_pending` once per update cycle.
    """

    def __init__(self) -> None:
        self._queue: "queue.Queue[Callable[[], None]]" = queue.Queue()

    def post(self, fn: Callable[[], None]) -> None:
        self._queue.put(fn)

    __call__ = post

    def run_pending(self, timeout: float | None = None) -> int:
        """Run queued callables on the current thread and return how many ran.

        With a ``timeout`` the first item is waited for up to that many
        seconds; anything queued behind it is drained without waiting.
        """
        ran = 0
        block = timeout is not None
        while True:
            try:
                fn = self._queue.get(block=block, timeout=timeout)
            except queue.Empty:
                return ran
            block = False
            try:
                fn()
            except Exception:
                logging.exception("Dispatched callback failed")
            ran += 1
