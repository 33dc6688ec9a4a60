"""Exception types shared across parley.

Completion failures are normally carried as values (see
``parley.llm.models.CompletionResult``); the exceptions here are for the
places where raising reads better than returning.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .llm.models import CompletionErrorKind


class ParleyError(Exception):
    """Base class for all parley errors."""


class MalformedSnapshot(ParleyError):
    """A snapshot document is missing required fields or has the wrong shape."""


class CompletionFailure(ParleyError):
    """A completion request failed.

    Attributes:
        kind: The failure category reported by the completion client
    """

    def __init__(self, kind: "CompletionErrorKind", message: str) -> None:
        super().__init__(message)
        self.kind = kind
