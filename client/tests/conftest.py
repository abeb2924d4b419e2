"""
Test configuration and fixtures for the MUD client test suite.

Provides test isolation (fresh configuration, deterministic randomness) and
in-memory stand-ins for the WebSocket and the terminal.
"""

import asyncio
import os
import random
from collections.abc import Generator
from typing import Any
from unittest.mock import MagicMock

import pytest
from websockets.exceptions import ConnectionClosed

os.environ.setdefault("MUDCLIENT_LOGGING_ENVIRONMENT", "unit_test")
os.environ.setdefault("MUDCLIENT_LOGGING_DISABLE_LOGGING", "true")

from client.config import ConnectionConfig, reset_config  # noqa: E402
from client.display import GameDisplay  # noqa: E402
from client.session.storage import MemoryStorage  # noqa: E402

_CLOSE = object()


class FakeSocket:
    """In-memory WebSocket: frames are fed by the test, sends are recorded."""

    def __init__(self, frames: list[str] | None = None) -> None:
        self.sent: list[str] = []
        self.closed = False
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        for frame in frames or []:
            self._queue.put_nowait(frame)

    def feed(self, frame: str) -> None:
        self._queue.put_nowait(frame)

    def drop(self) -> None:
        """Simulate the server going away."""
        self._queue.put_nowait(_CLOSE)

    async def send(self, message: str) -> None:
        if self.closed:
            raise ConnectionClosed(None, None)
        self.sent.append(message)

    async def close(self) -> None:
        self.closed = True
        self._queue.put_nowait(_CLOSE)

    def __aiter__(self) -> "FakeSocket":
        return self

    async def __anext__(self) -> str:
        item = await self._queue.get()
        if item is _CLOSE:
            raise StopAsyncIteration
        return item


class FakeConnector:
    """Stands in for websockets.connect; each call consumes the next outcome."""

    def __init__(self, *outcomes: Any) -> None:
        self.outcomes = list(outcomes)
        self.urls: list[str] = []
        self.kwargs: list[dict[str, Any]] = []

    async def __call__(self, url: str, **kwargs: Any) -> Any:
        self.urls.append(url)
        self.kwargs.append(kwargs)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture(autouse=True)
def reset_config_singleton() -> Generator[None, None, None]:
    """Reset config cache before and after each test."""
    reset_config()
    yield
    reset_config()


@pytest.fixture(autouse=True)
def deterministic_random_seed() -> Generator[None, None, None]:
    """Set deterministic random seed for reproducible tests."""
    random.seed(42)
    yield


@pytest.fixture
def fake_socket_cls() -> type[FakeSocket]:
    return FakeSocket


@pytest.fixture
def fake_connector_cls() -> type[FakeConnector]:
    return FakeConnector


@pytest.fixture
def connection_config() -> ConnectionConfig:
    """Insecure connection config pointing at a fixed local endpoint."""
    return ConnectionConfig(host="mud.test", port=6400, path="/", secure=False)


@pytest.fixture
def secure_connection_config() -> ConnectionConfig:
    return ConnectionConfig(host="mud.test", port=6400, path="/", secure=True)


@pytest.fixture
def memory_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def mock_display() -> MagicMock:
    """Display double that records every call."""
    return MagicMock(spec=GameDisplay)


def pytest_collection_modifyitems(config: Any, items: list[Any]) -> None:
    """Mark everything under unit/ as a unit test."""
    for item in items:
        file_path = str(item.fspath)
        if "/unit/" in file_path or "\\unit\\" in file_path:
            item.add_marker(pytest.mark.unit)
