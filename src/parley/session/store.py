"""Ordered, persisted message collection.

The store is the only owner of the message sequence and the active
settings. Every mutation writes the full state to the backing
``PersistentStore`` as one document, then notifies subscribers.
"""

import json
import logging
from collections.abc import Callable, Iterator, Mapping
from typing import Any

from pydantic import ValidationError

from ..config import SESSION_STORAGE_KEY
from ..errors import MalformedSnapshot
from ..storage import PersistentStore
from .models import ContentType, Message, MessageFilter, Settings, Snapshot, utcnow

logger = logging.getLogger(__name__)

StoreListener = Callable[[], None]


def parse_snapshot(data: Any) -> Snapshot:
    """Validate a decoded snapshot document.

    Raises:
        MalformedSnapshot: If ``messages`` or ``settings`` is absent or mistyped
    """
    if not isinstance(data, Mapping):
        raise MalformedSnapshot("Snapshot must be a JSON object")
    missing = [key for key in ("messages", "settings") if key not in data]
    if missing:
        raise MalformedSnapshot(f"Snapshot is missing required field(s): {', '.join(missing)}")
    try:
        return Snapshot.model_validate(data)
    except ValidationError as e:
        raise MalformedSnapshot(f"Snapshot has invalid fields: {e.error_count()} error(s)") from e


class MessageStore:
    """Conversation history plus settings, persisted on every change."""

    def __init__(self, backend: PersistentStore, key: str = SESSION_STORAGE_KEY):
        self._backend = backend
        self._key = key
        self._messages: list[Message] = []
        self._settings = Settings()
        self._listeners: list[StoreListener] = []

    # -- reading -----------------------------------------------------------

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    @property
    def settings(self) -> Settings:
        return self._settings

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))

    def get(self, message_id: str) -> Message | None:
        for message in self._messages:
            if message.id == message_id:
                return message
        return None

    def filtered(self, kind: MessageFilter = MessageFilter.ALL) -> list[Message]:
        """Messages matching a view filter."""
        if kind is MessageFilter.ALL:
            return list(self._messages)
        wanted = ContentType.CODE if kind is MessageFilter.CODE else ContentType.TEXT
        return [m for m in self._messages if m.content_type is wanted]

    # -- mutation ----------------------------------------------------------

    def append(self, message: Message) -> Message:
        """Add a message at the end, keeping timestamps non-decreasing.

        Returns:
            The message as stored (timestamp may be clamped)
        """
        if self._messages and message.timestamp < self._messages[-1].timestamp:
            message = message.model_copy(update={"timestamp": self._messages[-1].timestamp})
        self._commit([*self._messages, message])
        return message

    def truncate_from(self, index: int) -> list[Message]:
        """Drop every message at or after ``index``.

        Returns:
            The removed messages
        """
        if index < 0:
            raise ValueError(f"Truncation index must be non-negative, got {index}")
        removed = self._messages[index:]
        if not removed:
            return []
        self._commit(self._messages[:index])
        return removed

    def clear(self) -> None:
        """Empty the session. Settings are kept."""
        self._commit([])

    def update_message(self, message_id: str, **changes: Any) -> Message:
        """Replace fields of one message.

        Raises:
            KeyError: If no message has ``message_id``
        """
        for index, message in enumerate(self._messages):
            if message.id == message_id:
                updated = Message.model_validate({**message.model_dump(), **changes})
                messages = list(self._messages)
                messages[index] = updated
                self._commit(messages)
                return updated
        raise KeyError(message_id)

    def update_settings(self, **changes: Any) -> Settings:
        """Validate and apply settings changes.

        Raises:
            pydantic.ValidationError: If a value is out of range
        """
        settings = Settings.model_validate({**self._settings.model_dump(), **changes})
        self._commit(settings=settings)
        return settings

    # -- snapshots ---------------------------------------------------------

    def snapshot(self) -> Snapshot:
        """Serializable copy of the current session and settings."""
        return Snapshot(
            messages=list(self._messages),
            settings=self._settings.model_copy(),
            exported_at=utcnow(),
        )

    def restore(self, data: Snapshot | Mapping[str, Any]) -> None:
        """Replace session and settings atomically.

        Raises:
            MalformedSnapshot: If the document is invalid; state is untouched
            OSError: If the backend write fails; state is untouched
        """
        snapshot = data if isinstance(data, Snapshot) else parse_snapshot(data)
        self._commit(list(snapshot.messages), snapshot.settings.model_copy())

    def export_json(self, indent: int = 2) -> str:
        return self.snapshot().model_dump_json(by_alias=True, indent=indent)

    def import_json(self, text: str) -> None:
        """Restore from a JSON document.

        Raises:
            MalformedSnapshot: If the text is not valid JSON or not a valid snapshot
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedSnapshot(f"Snapshot is not valid JSON: {e.msg}") from e
        self.restore(data)

    def load(self) -> bool:
        """Restore from durable storage. Called once at startup.

        A corrupt stored document is logged and ignored.

        Returns:
            True if a stored session was loaded
        """
        raw = self._backend.get(self._key)
        if raw is None:
            return False
        try:
            data = json.loads(raw)
            snapshot = parse_snapshot(data)
        except (json.JSONDecodeError, MalformedSnapshot) as e:
            logger.warning("Ignoring unreadable stored session: %s", e)
            return False

        self._messages = list(snapshot.messages)
        self._settings = snapshot.settings
        logger.debug("Loaded %d message(s) from %s", len(self._messages), self._key)
        self._notify()
        return True

    # -- observers ---------------------------------------------------------

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register a listener called after every change.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _commit(self, messages: list[Message] | None = None, settings: Settings | None = None) -> None:
        """Persist the new state, then make it current.

        A failed write raises before memory changes, so memory and the
        backend never disagree.
        """
        messages = self._messages if messages is None else messages
        settings = self._settings if settings is None else settings
        document = Snapshot(
            messages=messages,
            settings=settings,
            exported_at=utcnow(),
        ).model_dump_json(by_alias=True)
        self._backend.set(self._key, document)
        self._messages = messages
        self._settings = settings
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()
