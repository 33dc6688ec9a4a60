"""Progressive reveal of assistant messages.

Simulates live typing of text that has already arrived in full. Each
message gets its own chain of timers, so reveals never interfere with one
another. One character is added per interval; at simulated time ``t`` the
display holds the first ``floor(t / interval)`` characters.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from .scheduling import Cancellable, Scheduler

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]
CompleteCallback = Callable[[], None]


@dataclass
class _Reveal:
    content: str
    interval_ms: float
    on_progress: ProgressCallback | None
    on_complete: CompleteCallback | None
    position: int = 0
    handle: Cancellable | None = None


class RevealAnimator:
    """Drives independent per-message reveals on a scheduler."""

    def __init__(self, scheduler: Scheduler):
        self._scheduler = scheduler
        self._active: dict[str, _Reveal] = {}
        self._displays: dict[str, str] = {}

    def start(
        self,
        message_id: str,
        content: str,
        interval_ms: float,
        on_progress: ProgressCallback | None = None,
        on_complete: CompleteCallback | None = None,
    ) -> None:
        """Begin revealing ``content`` for ``message_id``.

        Restarting a message cancels its previous reveal. Empty content or a
        non-positive interval completes immediately.
        """
        self.cancel(message_id)
        reveal = _Reveal(content, interval_ms, on_progress, on_complete)
        self._active[message_id] = reveal
        self._displays[message_id] = ""

        if not content or interval_ms <= 0:
            self._finish(message_id, reveal)
            return

        reveal.handle = self._scheduler.schedule(
            interval_ms, lambda: self._tick(message_id, reveal)
        )

    def _tick(self, message_id: str, reveal: _Reveal) -> None:
        if self._active.get(message_id) is not reveal:
            return

        reveal.position += 1
        if reveal.position >= len(reveal.content):
            self._finish(message_id, reveal)
            return

        text = reveal.content[: reveal.position]
        self._displays[message_id] = text
        if reveal.on_progress is not None:
            reveal.on_progress(text)
        reveal.handle = self._scheduler.schedule(
            reveal.interval_ms, lambda: self._tick(message_id, reveal)
        )

    def _finish(self, message_id: str, reveal: _Reveal) -> None:
        del self._active[message_id]
        self._displays[message_id] = reveal.content
        if reveal.on_progress is not None:
            reveal.on_progress(reveal.content)
        if reveal.on_complete is not None:
            reveal.on_complete()

    def complete_now(self, message_id: str) -> bool:
        """Jump an active reveal to its end. Returns False if none is active."""
        reveal = self._active.get(message_id)
        if reveal is None:
            return False
        if reveal.handle is not None:
            reveal.handle.cancel()
        self._finish(message_id, reveal)
        return True

    def cancel(self, message_id: str) -> None:
        """Stop a reveal without completing it; the display keeps its last value."""
        reveal = self._active.pop(message_id, None)
        if reveal is not None and reveal.handle is not None:
            reveal.handle.cancel()

    def cancel_all(self) -> None:
        """Tear down every active reveal."""
        for message_id in list(self._active):
            self.cancel(message_id)

    def reset(self) -> None:
        """Cancel everything and forget all displayed values."""
        if self._active:
            logger.debug("Cancelling %d active reveal(s)", len(self._active))
        self.cancel_all()
        self._displays.clear()

    def forget(self, message_id: str) -> None:
        """Cancel and drop the display value for one message."""
        self.cancel(message_id)
        self._displays.pop(message_id, None)

    def display(self, message_id: str) -> str | None:
        """Current displayed text, or None if the message was never revealed here."""
        return self._displays.get(message_id)

    def is_active(self, message_id: str) -> bool:
        return message_id in self._active

    @property
    def active_count(self) -> int:
        return len(self._active)
