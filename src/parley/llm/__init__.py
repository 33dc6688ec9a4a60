from .base import CompletionClient
from .factory import create_completion_client
from .models import ChatMessage, CompletionErrorKind, CompletionResult, RequestContext
from .providers import OpenAICompatibleClient

__all__ = [
    "ChatMessage",
    "CompletionClient",
    "CompletionErrorKind",
    "CompletionResult",
    "OpenAICompatibleClient",
    "RequestContext",
    "create_completion_client",
]
