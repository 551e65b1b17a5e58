"""Pytest configuration and shared fixtures."""

from typing import Any, Dict, List, Tuple
from unittest.mock import AsyncMock

import pytest

from signalroom.core.registry import RoomRegistry
from signalroom.core.router import EventRouter


class RecordingTransport:
    """Captures every (connection_id, message) handed to the transport."""

    def __init__(self):
        self.sent: List[Tuple[str, Dict[str, Any]]] = []

    async def send(self, connection_id: str, message: Dict[str, Any]) -> None:
        self.sent.append((connection_id, message))

    def received(self, connection_id: str) -> List[Dict[str, Any]]:
        return [msg for cid, msg in self.sent if cid == connection_id]

    def events_for(self, connection_id: str) -> List[str]:
        return [msg["event"] for msg in self.received(connection_id)]

    def clear(self):
        self.sent.clear()


@pytest.fixture
def registry() -> RoomRegistry:
    return RoomRegistry()


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def router(registry: RoomRegistry, transport: RecordingTransport) -> EventRouter:
    return EventRouter(registry, send=transport.send)


@pytest.fixture
def mock_websocket():
    """Create a mock websocket connection that reports itself open."""
    mock_ws = AsyncMock()
    mock_ws.remote_address = ("127.0.0.1", 54321)
    mock_ws.closed = False
    mock_ws.close_code = None
    mock_ws.send = AsyncMock()
    mock_ws.close = AsyncMock()
    return mock_ws
