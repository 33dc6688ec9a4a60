"""Data models for the conversation session.

These models define messages, settings and the snapshot document,
independent of where the snapshot is stored. Python attributes are
snake_case; serialized documents use camelCase keys.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from uuid_extensions import uuid7

from ..config import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    DEFAULT_TEMPERATURE,
    DEFAULT_TYPING_SPEED_MS,
)
from ..llm.models import RequestContext


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_message_id() -> str:
    return str(uuid7())


class Role(str, Enum):
    """Who produced a message."""

    USER = "user"
    ASSISTANT = "assistant"


class ContentType(str, Enum):
    """How message content should be presented."""

    TEXT = "text"
    CODE = "code"


class RevealState(str, Enum):
    """Progressive-reveal lifecycle of a message."""

    IMMEDIATE = "immediate"  # Shown in full at once (user messages, imports)
    REVEALING = "revealing"  # Assistant text still being revealed
    REVEALED = "revealed"  # Reveal finished


class MessageFilter(str, Enum):
    """Which messages a view should show."""

    ALL = "all"
    CODE = "code"
    TEXT = "text"


class Message(BaseModel):
    """One turn in the conversation."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=new_message_id)
    role: Role
    content: str
    content_type: ContentType = ContentType.TEXT
    language: str | None = None
    timestamp: datetime = Field(default_factory=utcnow)
    reveal_state: RevealState = RevealState.IMMEDIATE

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Offset-less ISO strings are read as UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _check_consistency(self) -> "Message":
        if self.language is not None and self.content_type is not ContentType.CODE:
            raise ValueError("language is only allowed on code messages")
        if self.reveal_state is RevealState.REVEALING and self.role is not Role.ASSISTANT:
            raise ValueError("only assistant messages can be revealing")
        return self


class Settings(BaseModel):
    """Request settings plus UI preferences, persisted with the session."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    model: str = DEFAULT_MODEL
    temperature: float = Field(default=DEFAULT_TEMPERATURE, ge=0.0, le=2.0)
    max_tokens: int = Field(default=DEFAULT_MAX_TOKENS, gt=0)
    system_prompt: str = ""
    typing_speed: int = Field(default=DEFAULT_TYPING_SPEED_MS, ge=0, description="Milliseconds per revealed character")
    auto_scroll: bool = True
    code_highlighting: bool = True
    speech_recognition: bool = False
    dark_mode: bool = True

    def to_request_context(self) -> RequestContext:
        """Snapshot the fields a completion request needs."""
        return RequestContext(
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            system_prompt=self.system_prompt,
        )


class Snapshot(BaseModel):
    """Complete persisted/exported representation of session + settings."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    messages: list[Message]
    settings: Settings
    exported_at: datetime | None = None
