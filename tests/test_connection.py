import asyncio
import json

from relay.constants import OUTBOX_MAX_SIZE
from relay.models import ChatMessageEvent, RoomInfoEvent

from tests.conftest import FakeConnection


class BrokenTransport(FakeConnection):
    async def _transmit(self, payload: str):
        raise ConnectionResetError("peer went away")


def test_send_queues_serialized_event():
    conn = FakeConnection()

    assert conn.send(RoomInfoEvent(room_id="R1", member_count=3)) is True
    assert conn.received() == [{"type": "room-info", "roomId": "R1", "memberCount": 3}]


def test_send_to_closed_transport_is_skipped():
    conn = FakeConnection()
    conn.transport_open = False

    assert conn.is_open() is False
    assert conn.send(RoomInfoEvent(room_id="R1", member_count=1)) is False
    assert conn.received() == []


def test_send_drops_when_outbox_is_full():
    conn = FakeConnection()
    event = ChatMessageEvent(username="a", text="spam", timestamp="12:00:00")

    for _ in range(OUTBOX_MAX_SIZE):
        assert conn.send(event)

    assert conn.send(event) is False


async def test_pump_transmits_in_order():
    conn = FakeConnection()
    writer = asyncio.create_task(conn.pump())

    for i in range(3):
        conn.send(ChatMessageEvent(username="a", text=str(i), timestamp="12:00:00"))
    await asyncio.wait_for(conn._outbox.join(), timeout=1)
    writer.cancel()

    assert [json.loads(p)["text"] for p in conn.transmitted] == ["0", "1", "2"]


async def test_transmit_failure_marks_connection_closed():
    conn = BrokenTransport()
    writer = asyncio.create_task(conn.pump())

    conn.send(RoomInfoEvent(room_id="R1", member_count=1))
    await asyncio.wait_for(conn._outbox.join(), timeout=1)
    writer.cancel()

    assert conn.is_open() is False
    assert conn.send(RoomInfoEvent(room_id="R1", member_count=1)) is False


async def test_close_notification_fires_exactly_once():
    conn = FakeConnection()
    calls = []

    async def listener(connection):
        calls.append(connection)

    conn.add_close_listener(listener)

    assert await conn.notify_closed() is True
    assert await conn.notify_closed("again") is False
    assert calls == [conn]
    assert conn.is_open() is False


async def test_failing_listener_does_not_block_the_rest():
    conn = FakeConnection()
    calls = []

    async def broken(connection):
        raise RuntimeError("boom")

    async def listener(connection):
        calls.append("ran")

    conn.add_close_listener(broken)
    conn.add_close_listener(listener)

    assert await conn.notify_closed() is True
    assert calls == ["ran"]


async def test_close_notification_still_fires_after_send_failure():
    conn = BrokenTransport()
    calls = []

    async def listener(connection):
        calls.append(connection)

    conn.add_close_listener(listener)
    writer = asyncio.create_task(conn.pump())
    conn.send(RoomInfoEvent(room_id="R1", member_count=1))
    await asyncio.wait_for(conn._outbox.join(), timeout=1)
    writer.cancel()

    assert await conn.notify_closed() is True
    assert calls == [conn]


def test_touch_updates_last_seen():
    conn = FakeConnection()
    conn.last_seen = 0

    conn.touch()

    assert conn.last_seen > 0
