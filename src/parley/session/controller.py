"""Conversation session orchestration.

The controller ties the pieces together: it appends the user turn, issues
one completion request at a time, classifies the answer, appends the
assistant turn and drives its reveal. Failures land in the ErrorReporter;
nothing is retried automatically.

Request lifecycle:
    IDLE -> SENDING -> IDLE   (success: assistant message appended)
                      -> IDLE   (failure: error surfaced)

A send issued while SENDING is rejected, not queued.
"""

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from ..errors import MalformedSnapshot
from ..llm import ChatMessage, CompletionClient, CompletionErrorKind, CompletionResult
from ..storage import atomic_write_text
from .classifier import classify
from .events import SessionEvent, SessionEventType, SessionListener, SessionState
from .models import Message, MessageFilter, RevealState, Role, Settings, utcnow
from .reporter import ErrorReporter
from .reveal import RevealAnimator
from .scheduling import Scheduler
from .store import MessageStore

logger = logging.getLogger(__name__)

INVALID_HISTORY_FILE = "Invalid chat history file"


def export_file_name() -> str:
    """Default file name for an export, e.g. chat-history-2026-10-16T12-00-00Z.json."""
    stamp = utcnow().strftime("%Y-%m-%dT%H-%M-%SZ")
    return f"chat-history-{stamp}.json"


class SessionController:
    """Orchestrates send / regenerate / clear for one conversation.

    Responses to requests issued before the most recent clear or import are
    discarded, so a late answer never lands in a session it was not asked in.
    """

    def __init__(
        self,
        store: MessageStore,
        client: CompletionClient,
        scheduler: Scheduler,
        animator: RevealAnimator | None = None,
        reporter: ErrorReporter | None = None,
    ):
        self._store = store
        self._client = client
        self._animator = animator or RevealAnimator(scheduler)
        self._reporter = reporter or ErrorReporter(scheduler)
        self._state = SessionState.IDLE
        self._generation = 0
        self._listeners: list[SessionListener] = []
        self.input_buffer = ""

        self._reporter.subscribe(
            lambda text: self._emit(SessionEventType.ERROR_CHANGED, text=text)
        )

    # -- properties --------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def in_flight(self) -> bool:
        return self._state is SessionState.SENDING

    @property
    def messages(self) -> tuple[Message, ...]:
        return self._store.messages

    @property
    def settings(self) -> Settings:
        return self._store.settings

    @property
    def error(self) -> str | None:
        return self._reporter.current

    @property
    def store(self) -> MessageStore:
        return self._store

    @property
    def animator(self) -> RevealAnimator:
        return self._animator

    @property
    def reporter(self) -> ErrorReporter:
        return self._reporter

    def display_text(self, message: Message) -> str:
        """Text a view should show for ``message`` right now."""
        if message.reveal_state is RevealState.REVEALING:
            shown = self._animator.display(message.id)
            if shown is not None:
                return shown
        return message.content

    def filtered(self, kind: MessageFilter) -> list[Message]:
        return self._store.filtered(kind)

    # -- lifecycle ---------------------------------------------------------

    def start(self) -> bool:
        """Load durable state. Call once at process start.

        Messages persisted mid-reveal have no animation left to finish them,
        so they are settled to REVEALED.

        Returns:
            True if a stored session was found
        """
        loaded = self._store.load()
        for message in self._store.messages:
            if message.reveal_state is RevealState.REVEALING:
                self._store.update_message(message.id, reveal_state=RevealState.REVEALED)
        if loaded:
            logger.info("Restored session with %d message(s)", len(self._store))
            self._emit(SessionEventType.SESSION_RESET)
        return loaded

    def shutdown(self) -> None:
        """Stop all timers. In-flight requests are not cancelled."""
        self._animator.cancel_all()
        self._reporter.clear()

    async def aclose(self) -> None:
        """Stop timers and release the completion client."""
        self.shutdown()
        await self._client.close()

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register for session events.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    # -- operations --------------------------------------------------------

    async def send(self, content: str | None = None) -> Message | None:
        """Send a user turn and wait for the assistant's answer.

        Args:
            content: Explicit text; None (or empty) sends the input buffer

        Returns:
            The appended assistant message, or None if the send was rejected,
            failed, or its response was discarded
        """
        override = content or None
        text = override if override is not None else self.input_buffer

        if self.in_flight:
            logger.debug("Send rejected: a request is already in flight")
            return None
        if override is None and not text.strip():
            return None

        return await self._submit(text.strip(), from_buffer=override is None)

    async def regenerate_last(self) -> Message | None:
        """Redo the last exchange.

        Truncates the session to just before the most recent user message,
        then replays that message's content. The replayed turn is appended
        again, so the persisted session matches what was sent.
        """
        if len(self._store) < 2 or self.in_flight:
            return None

        messages = self._store.messages
        for index in range(len(messages) - 1, -1, -1):
            if messages[index].role is Role.USER:
                break
        else:
            return None

        replay = messages[index].content
        removed = self._store.truncate_from(index)
        for message in removed:
            self._animator.forget(message.id)
        self._emit(SessionEventType.MESSAGES_REMOVED)
        logger.info("Regenerating from message %d (%d removed)", index, len(removed))

        return await self._submit(replay, from_buffer=False)

    def clear(self) -> None:
        """Empty the session unconditionally; callers confirm beforehand."""
        self._generation += 1
        self._animator.reset()
        self._store.clear()
        self._emit(SessionEventType.SESSION_RESET)

    def skip_reveal(self, message_id: str) -> bool:
        """Finish a running reveal at once."""
        return self._animator.complete_now(message_id)

    def update_settings(self, **changes: Any) -> Settings:
        """Apply settings changes; raises pydantic.ValidationError when invalid."""
        settings = self._store.update_settings(**changes)
        self._emit(SessionEventType.SETTINGS_CHANGED)
        return settings

    def export_snapshot(self, destination: str | Path) -> Path:
        """Write the session and settings as JSON.

        Args:
            destination: File path, or a directory to place a timestamped file in

        Returns:
            The path written
        """
        path = Path(destination).expanduser()
        if path.is_dir():
            path = path / export_file_name()
        atomic_write_text(path, self._store.export_json())
        logger.info("Exported %d message(s) to %s", len(self._store), path)
        return path

    def import_snapshot(self, source: str | Path) -> bool:
        """Replace the session and settings from an exported file.

        Failures are reported through the ErrorReporter and leave the current
        state untouched.

        Returns:
            True on success
        """
        path = Path(source).expanduser()
        try:
            text = path.read_text(encoding="utf-8")
            self._store.import_json(text)
        except (OSError, UnicodeDecodeError, MalformedSnapshot) as e:
            logger.warning("Import from %s failed: %s", path, e)
            self._reporter.report(INVALID_HISTORY_FILE)
            return False

        self._generation += 1
        self._animator.reset()
        logger.info("Imported %d message(s) from %s", len(self._store), path)
        self._emit(SessionEventType.SESSION_RESET)
        return True

    # -- internals ---------------------------------------------------------

    async def _submit(self, text: str, from_buffer: bool) -> Message | None:
        user_message = self._store.append(Message(role=Role.USER, content=text))
        if from_buffer:
            self.input_buffer = ""
        self._emit(SessionEventType.MESSAGE_APPENDED, message=user_message)

        self._reporter.clear()
        self._set_state(SessionState.SENDING)
        generation = self._generation

        history = [ChatMessage(role=m.role.value, content=m.content) for m in self._store.messages]
        context = self._store.settings.to_request_context()

        assistant: Message | None = None
        try:
            try:
                result = await self._client.complete(history, context)
            except Exception as e:
                logger.exception("Completion client raised instead of returning a result")
                result = CompletionResult.err(CompletionErrorKind.OTHER, str(e) or None)

            if generation != self._generation:
                logger.info("Discarding response to a request issued before the session was reset")
            elif result.is_ok:
                assistant = self._append_assistant(result.text or "")
            else:
                self._reporter.report(result.message or "An unexpected error occurred")
        finally:
            self._set_state(SessionState.IDLE)
            self._emit(SessionEventType.READY)

        return assistant

    def _append_assistant(self, raw: str) -> Message:
        classification = classify(raw)
        message = self._store.append(
            Message(
                role=Role.ASSISTANT,
                content=classification.content,
                content_type=classification.content_type,
                language=classification.language,
                reveal_state=RevealState.REVEALING,
            )
        )
        message_id = message.id
        self._animator.start(
            message_id,
            message.content,
            self._store.settings.typing_speed,
            on_progress=lambda shown: self._emit(
                SessionEventType.REVEAL_PROGRESS, message=message, text=shown
            ),
            on_complete=lambda: self._finish_reveal(message_id),
        )
        # Empty content or zero speed finishes inside start()
        current = self._store.get(message_id) or message
        self._emit(SessionEventType.MESSAGE_APPENDED, message=current)
        return current

    def _finish_reveal(self, message_id: str) -> None:
        if self._store.get(message_id) is None:
            return
        updated = self._store.update_message(message_id, reveal_state=RevealState.REVEALED)
        self._emit(SessionEventType.REVEAL_COMPLETE, message=updated)

    def _set_state(self, state: SessionState) -> None:
        if state is self._state:
            return
        self._state = state
        self._emit(SessionEventType.STATE_CHANGED, state=state)

    def _emit(
        self,
        event_type: SessionEventType,
        message: Message | None = None,
        text: str | None = None,
        state: SessionState | None = None,
    ) -> None:
        event = SessionEvent(type=event_type, message=message, text=text, state=state)
        for listener in list(self._listeners):
            listener(event)
