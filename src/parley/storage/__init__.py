"""Durable key-value storage for session state.

Provides a string key-value interface with in-memory and JSON-file backends.
"""

from .base import PersistentStore
from .factory import create_persistent_store
from .file import JsonFileStore, atomic_write_text
from .memory import InMemoryStore

__all__ = [
    "InMemoryStore",
    "JsonFileStore",
    "PersistentStore",
    "atomic_write_text",
    "create_persistent_store",
]
