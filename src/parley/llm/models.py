from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ..errors import CompletionFailure


class ChatMessage(BaseModel):
    """Represents one turn as sent to the completion API."""

    model_config = ConfigDict(frozen=True)

    role: str = Field(description="Role of the message sender: 'user', 'assistant', or 'system'")
    content: str = Field(description="Content of the message")


class RequestContext(BaseModel):
    """Settings snapshot bound to one outstanding request."""

    model_config = ConfigDict(frozen=True)

    model: str = Field(description="Model identifier")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=2000, gt=0)
    system_prompt: str = Field(default="", description="Prepended as a system turn when non-empty")


class CompletionErrorKind(str, Enum):
    """Failure categories a completion client can report."""

    MISSING_CREDENTIAL = "missing_credential"
    NETWORK = "network"
    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate_limited"
    MALFORMED_RESPONSE = "malformed_response"
    OTHER = "other"


DEFAULT_ERROR_MESSAGES: dict[CompletionErrorKind, str] = {
    CompletionErrorKind.MISSING_CREDENTIAL: "API key not configured",
    CompletionErrorKind.NETWORK: "Network error: could not reach the completion service",
    CompletionErrorKind.UNAUTHORIZED: "Unauthorized: check your API key",
    CompletionErrorKind.RATE_LIMITED: "Rate limited: wait a moment before sending again",
    CompletionErrorKind.MALFORMED_RESPONSE: "Invalid response format",
    CompletionErrorKind.OTHER: "An unexpected error occurred",
}


class CompletionResult(BaseModel):
    """Outcome of a completion request: either text or a failure.

    Usage:
        result = await client.complete(history, context)
        if result.is_ok:
            print(result.text)
        else:
            print(result.error, result.message)
    """

    model_config = ConfigDict(frozen=True)

    text: str | None = Field(default=None, description="Assistant text on success")
    error: CompletionErrorKind | None = Field(default=None, description="Failure kind")
    message: str | None = Field(default=None, description="User-facing failure message")

    @classmethod
    def ok(cls, text: str) -> "CompletionResult":
        return cls(text=text)

    @classmethod
    def err(cls, kind: CompletionErrorKind, message: str | None = None) -> "CompletionResult":
        return cls(error=kind, message=message or DEFAULT_ERROR_MESSAGES[kind])

    @property
    def is_ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> str:
        """Return the text or raise CompletionFailure."""
        if self.error is not None:
            raise CompletionFailure(self.error, self.message or DEFAULT_ERROR_MESSAGES[self.error])
        return self.text or ""
