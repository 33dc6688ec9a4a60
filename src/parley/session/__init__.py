"""Conversation session engine.

Module structure (each module hides one design decision):
- models.py: Message, Settings and snapshot representation
- scheduling.py: How delayed callbacks are driven (asyncio or virtual clock)
- classifier.py: Text vs. fenced-code detection
- reveal.py: Progressive reveal timing
- reporter.py: Transient error visibility
- store.py: Ordering and persistence of the message sequence
- controller.py: Request lifecycle and orchestration
"""

from .classifier import Classification, classify, detect_language
from .controller import SessionController
from .events import SessionEvent, SessionEventType, SessionListener, SessionState
from .models import (
    ContentType,
    Message,
    MessageFilter,
    RevealState,
    Role,
    Settings,
    Snapshot,
)
from .reporter import ErrorReporter
from .reveal import RevealAnimator
from .scheduling import AsyncioScheduler, Scheduler, VirtualScheduler
from .store import MessageStore, parse_snapshot

__all__ = [
    "AsyncioScheduler",
    "Classification",
    "ContentType",
    "ErrorReporter",
    "Message",
    "MessageFilter",
    "MessageStore",
    "RevealAnimator",
    "RevealState",
    "Role",
    "Scheduler",
    "SessionController",
    "SessionEvent",
    "SessionEventType",
    "SessionListener",
    "SessionState",
    "Settings",
    "Snapshot",
    "VirtualScheduler",
    "classify",
    "detect_language",
    "parse_snapshot",
]
