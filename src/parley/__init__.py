"""
Parley: an interactive client for hosted chat-completion APIs.

Holds multi-turn conversations, replays assistant output with a
progressive-reveal effect, and persists, exports and imports history.
"""

__version__ = "0.1.0"

from .errors import CompletionFailure, MalformedSnapshot, ParleyError
from .llm import CompletionClient, create_completion_client
from .session import MessageStore, SessionController
from .storage import create_persistent_store

__all__ = [
    "CompletionClient",
    "CompletionFailure",
    "MalformedSnapshot",
    "MessageStore",
    "ParleyError",
    "SessionController",
    "create_completion_client",
    "create_persistent_store",
]
