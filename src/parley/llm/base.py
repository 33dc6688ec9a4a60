from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from .models import ChatMessage, CompletionResult, RequestContext


class CompletionClient(ABC):
    """Abstract base class for completion clients.

    This module hides the design decision of which hosted API answers the
    conversation. Implementations must handle:
    - API client setup and credential attachment
    - Request/response format conversion
    - Mapping transport and API failures onto CompletionErrorKind

    Failures are returned, not raised, and are never retried automatically.

    Supports async context manager protocol for proper resource cleanup:
        async with client:
            result = await client.complete(history, context)
    """

    @abstractmethod
    async def complete(
        self,
        history: Sequence[ChatMessage],
        context: RequestContext,
    ) -> CompletionResult:
        """Request the next assistant turn.

        Args:
            history: Full conversation including the new user turn
            context: Model and sampling settings for this request

        Returns:
            CompletionResult with the assistant text or a failure kind
        """

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections or resources."""

    async def __aenter__(self) -> "CompletionClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit with automatic cleanup.

        Note: Suppresses "Event loop is closed" errors during cleanup.
        This is a known harmless race condition in httpx/anyio cleanup:
        https://github.com/encode/httpx/issues/914
        """
        try:
            await self.close()
        except RuntimeError as e:
            if "Event loop is closed" not in str(e):
                raise
