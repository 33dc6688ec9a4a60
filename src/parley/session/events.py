"""State-change notifications published by the session controller."""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from .models import Message


class SessionState(str, Enum):
    """Request lifecycle of a session."""

    IDLE = "idle"
    SENDING = "sending"


class SessionEventType(str, Enum):
    STATE_CHANGED = "state_changed"
    MESSAGE_APPENDED = "message_appended"
    MESSAGES_REMOVED = "messages_removed"
    REVEAL_PROGRESS = "reveal_progress"
    REVEAL_COMPLETE = "reveal_complete"
    ERROR_CHANGED = "error_changed"
    SESSION_RESET = "session_reset"  # Cleared, imported or loaded
    SETTINGS_CHANGED = "settings_changed"
    READY = "ready"  # Input surface may take focus again


@dataclass(frozen=True)
class SessionEvent:
    """One notification.

    Attributes:
        type: What happened
        message: The message concerned, for message and reveal events
        text: Displayed text for REVEAL_PROGRESS, error text for ERROR_CHANGED
        state: New state for STATE_CHANGED
    """

    type: SessionEventType
    message: Message | None = None
    text: str | None = None
    state: SessionState | None = None


SessionListener = Callable[[SessionEvent], None]
