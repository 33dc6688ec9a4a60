"""Cancellable delayed callbacks.

Hides how timers are driven. The asyncio scheduler is used by the CLI and
TUI; the virtual scheduler advances a simulated clock on demand, which makes
reveal and error-expiry timing deterministic.

All delays are in milliseconds.
"""

import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Protocol


class Cancellable(Protocol):
    """Handle returned by ``Scheduler.schedule``."""

    def cancel(self) -> None: ...


class Scheduler(ABC):
    """Schedules a callback to run once after a delay."""

    @abstractmethod
    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> Cancellable:
        """Run ``callback`` after ``delay_ms`` milliseconds.

        Returns:
            Handle whose ``cancel()`` prevents the callback if it has not run
        """


class AsyncioScheduler(Scheduler):
    """Scheduler backed by ``loop.call_later``."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(max(delay_ms, 0) / 1000.0, callback)


class VirtualHandle:
    """Handle for a callback on the virtual clock."""

    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class VirtualScheduler(Scheduler):
    """Scheduler driven by a simulated clock.

    Usage:
        scheduler = VirtualScheduler()
        scheduler.schedule(100, callback)
        scheduler.advance(99)   # nothing fires
        scheduler.advance(1)    # callback fires at t=100
    """

    def __init__(self) -> None:
        self._now = 0.0
        self._queue: list[tuple[float, int, VirtualHandle]] = []
        self._sequence = itertools.count()

    @property
    def now(self) -> float:
        """Current simulated time in milliseconds."""
        return self._now

    @property
    def pending(self) -> int:
        """Number of callbacks still waiting to fire."""
        return sum(1 for _, _, handle in self._queue if not handle.cancelled)

    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> VirtualHandle:
        handle = VirtualHandle(self._now + max(delay_ms, 0), callback)
        heapq.heappush(self._queue, (handle.due, next(self._sequence), handle))
        return handle

    def advance(self, delay_ms: float) -> None:
        """Move the clock forward, firing every callback that falls due.

        Callbacks scheduled by firing callbacks also run if they fall
        inside the window.
        """
        target = self._now + delay_ms
        while self._queue and self._queue[0][0] <= target:
            due, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = due
            handle.callback()
        self._now = target

    def run_all(self, limit: int = 1_000_000) -> None:
        """Fire callbacks until the queue is empty."""
        fired = 0
        while self._queue:
            due, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = due
            handle.callback()
            fired += 1
            if fired >= limit:
                raise RuntimeError(f"Scheduler did not settle after {limit} callbacks")
