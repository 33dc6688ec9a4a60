"""Factory for creating persistent key-value backends."""

from typing import Any

from .base import PersistentStore


def create_persistent_store(
    backend: str = "memory",
    **kwargs: Any
) -> PersistentStore:
    """Create a persistent store backend.

    Args:
        backend: Backend type ("memory" or "file")
        **kwargs: Backend-specific configuration
            For file:
                - directory: str | Path (default: '~/.parley')

    Returns:
        PersistentStore instance

    Raises:
        ValueError: If backend type is not supported
    """
    if backend == "memory":
        from .memory import InMemoryStore
        return InMemoryStore(**kwargs)

    elif backend == "file":
        from .file import JsonFileStore
        return JsonFileStore(**kwargs)

    raise ValueError(
        f"Unsupported storage backend: {backend}. "
        f"Supported backends: memory, file"
    )
