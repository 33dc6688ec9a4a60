"""In-memory key-value backend.

Simple dict-based storage. Data is lost when the process exits.
"""

from .base import PersistentStore


class InMemoryStore(PersistentStore):
    """Dict-backed store for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})
        self._write_count = 0

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._write_count += 1

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    @property
    def write_count(self) -> int:
        """Number of ``set`` calls since creation."""
        return self._write_count

    @property
    def backend_type(self) -> str:
        return "memory"
