"""Abstract base class for persistent key-value backends.

This module defines the interface the session store writes through.
The abstraction hides:
- Storage medium (process memory, files on disk)
- Write atomicity mechanism
"""

from abc import ABC, abstractmethod


class PersistentStore(ABC):
    """Abstract string key-value store.

    Values are opaque strings (the session store writes JSON documents).
    Each ``set`` must be atomic: readers see either the old or the new value.
    """

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the value stored under ``key``, or None if absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key`` if present."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""
