"""Transient user-visible error state.

Exactly one error is visible at a time. A new report supersedes the old one
and restarts the auto-clear countdown.
"""

import logging
from collections.abc import Callable

from ..config import ERROR_TIMEOUT_MS
from .scheduling import Cancellable, Scheduler

logger = logging.getLogger(__name__)

ErrorListener = Callable[[str | None], None]


class ErrorReporter:
    """Holds the current error and expires it after a fixed delay."""

    def __init__(self, scheduler: Scheduler, timeout_ms: float = ERROR_TIMEOUT_MS):
        self._scheduler = scheduler
        self._timeout_ms = timeout_ms
        self._current: str | None = None
        self._handle: Cancellable | None = None
        self._listeners: list[ErrorListener] = []

    @property
    def current(self) -> str | None:
        """The visible error message, or None."""
        return self._current

    def report(self, message: str) -> None:
        """Show ``message`` and restart the auto-clear timer."""
        self._cancel_timer()
        self._current = message
        self._handle = self._scheduler.schedule(self._timeout_ms, self._expire)
        logger.info("Error reported: %s", message)
        self._notify()

    def clear(self) -> None:
        """Hide the current error immediately."""
        self._cancel_timer()
        if self._current is None:
            return
        self._current = None
        self._notify()

    def subscribe(self, listener: ErrorListener) -> Callable[[], None]:
        """Register a listener called with the new error (or None on clear).

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _expire(self) -> None:
        self._handle = None
        self._current = None
        self._notify()

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._current)
