"""Pytest configuration and shared fixtures."""
import asyncio
import os
from collections.abc import Sequence

import pytest

from parley.llm import ChatMessage, CompletionClient, CompletionResult, RequestContext
from parley.session import MessageStore, SessionController, VirtualScheduler
from parley.storage import InMemoryStore


class FakeCompletionClient(CompletionClient):
    """Completion client that replays scripted results and records requests."""

    def __init__(self, results: Sequence[CompletionResult | Exception] | None = None):
        self.results = list(results or [])
        self.calls: list[tuple[list[ChatMessage], RequestContext]] = []
        self.closed = False
        self.before_return = None

    async def complete(self, history, context):
        self.calls.append((list(history), context))
        if self.before_return is not None:
            self.before_return()
        result = self.results.pop(0) if self.results else CompletionResult.ok("ok")
        if isinstance(result, Exception):
            raise result
        return result

    async def close(self):
        self.closed = True


class BlockingClient(FakeCompletionClient):
    """Fake client whose answer waits until ``release`` is set."""

    def __init__(self):
        super().__init__()
        self.release = asyncio.Event()

    async def complete(self, history, context):
        self.calls.append((list(history), context))
        await self.release.wait()
        return CompletionResult.ok("late answer")


class FailingWriteStore(InMemoryStore):
    """In-memory backend whose writes raise once ``fail_writes`` is set."""

    def __init__(self):
        super().__init__()
        self.fail_writes = False

    def set(self, key, value):
        if self.fail_writes:
            raise OSError("disk full")
        super().set(key, value)


@pytest.fixture(scope="session")
def api_keys():
    """Return API keys from environment."""
    return {
        "openrouter": os.getenv("OPENROUTER_API_KEY"),
    }


@pytest.fixture
def scheduler():
    return VirtualScheduler()


@pytest.fixture
def backend():
    return InMemoryStore()


@pytest.fixture
def store(backend):
    return MessageStore(backend)


@pytest.fixture
def client():
    return FakeCompletionClient()


@pytest.fixture
def blocking_client():
    return BlockingClient()


@pytest.fixture
def failing_backend():
    return FailingWriteStore()


@pytest.fixture
def make_controller(scheduler):
    """Build an unstarted controller on the shared virtual clock."""

    def _make(client=None, backend=None):
        return SessionController(
            MessageStore(backend or InMemoryStore()),
            client or FakeCompletionClient(),
            scheduler,
        )

    return _make


@pytest.fixture
def controller(store, client, scheduler):
    """Started controller on a virtual clock with an empty session."""
    controller = SessionController(store, client, scheduler)
    controller.start()
    return controller


@pytest.fixture
def sample_code_response():
    """Return a completion containing one tagged Python block."""
    return "Here you go:\n```python\ndef add(a, b):\n    return a + b\n```\nEnjoy!"
