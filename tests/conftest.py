import json
from typing import Any, Dict, List

import pytest

from relay.connection import ConnectionHandle
from relay.room_registry import RoomRegistry


class FakeConnection(ConnectionHandle):
    """In-memory connection that records what the relay queued for it"""

    def __init__(self, connection_id: str = None, alive: bool = True):
        super().__init__(connection_id)
        self.transport_open = True
        self.alive = alive
        self.transmitted: List[str] = []
        self.close_code = None

    def _transport_open(self) -> bool:
        return self.transport_open

    async def _transmit(self, payload: str):
        self.transmitted.append(payload)

    async def ping(self, timeout: float) -> bool:
        return self.alive

    async def close(self, code: int = 1000, reason: str = ""):
        self.close_code = code
        self.transport_open = False

    def received(self) -> List[Dict[str, Any]]:
        """Drain and decode everything queued so far"""
        events = []
        while not self._outbox.empty():
            events.append(json.loads(self._outbox.get_nowait()))
            self._outbox.task_done()
        return events

    def received_types(self) -> List[str]:
        return [event["type"] for event in self.received()]


@pytest.fixture
def registry():
    return RoomRegistry()


@pytest.fixture
def make_connection():
    def factory(name: str = None, alive: bool = True) -> FakeConnection:
        return FakeConnection(name, alive=alive)
    return factory
