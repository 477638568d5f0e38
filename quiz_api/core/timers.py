"""Cancellable background timers.

Routers that need periodic housekeeping create a :class:`RepeatingTimer` and
hand it back to their caller, so the owner of the app can stop every timer
deterministically at shutdown (and between tests).
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Iterable

logger = logging.getLogger(__name__)


class RepeatingTimer:
    """Run ``func`` every ``interval_seconds`` on a daemon thread until cancelled."""

    def __init__(self, interval_seconds: float, func: Callable[[], object], *, name: str) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        self.interval_seconds = interval_seconds
        self.name = name
        self._func = func
        self._stopped = threading.Event()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    @property
    def cancelled(self) -> bool:
        return self._stopped.is_set()

    def start(self) -> "RepeatingTimer":
        self._thread.start()
        return self

    def cancel(self) -> None:
        """Stop the timer. Safe to call more than once."""
        self._stopped.set()
        if self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join(timeout=1.0)

    def _run(self) -> None:
        # Event.wait returns True as soon as cancel() is called.
        while not self._stopped.wait(self.interval_seconds):
            try:
                self._func()
            except Exception:
                logger.exception("timer.tick_failed", extra={"timer": self.name})


def release_timers(timers: Iterable[RepeatingTimer]) -> None:
    """Cancel every timer in ``timers``."""
    for timer in timers:
        timer.cancel()
