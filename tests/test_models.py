import json

import pytest
from pydantic import ValidationError

from relay.constants import MAX_MESSAGE_LENGTH
from relay.models import (
    ChatEvent,
    ChatMessageEvent,
    JoinEvent,
    Room,
    Session,
    UserLeftEvent,
    parse_client_event,
)


def test_parse_join_uses_wire_field_names():
    event = parse_client_event('{"type": "join", "roomId": "R1", "username": "alice"}')

    assert isinstance(event, JoinEvent)
    assert event.room_id == "R1"
    assert event.username == "alice"


def test_parse_join_without_room_id():
    event = parse_client_event('{"type": "join", "username": "alice"}')

    assert isinstance(event, JoinEvent)
    assert event.room_id is None


def test_parse_chat():
    event = parse_client_event(b'{"type": "chat", "text": "hi"}')

    assert isinstance(event, ChatEvent)
    assert event.text == "hi"


@pytest.mark.parametrize("raw", [
    "not json",
    '{"type": "dance"}',
    '{"text": "no type"}',
    '{"type": "chat"}',
    '{"type": "join", "roomId": 42, "username": "alice"}',
    '["join"]',
])
def test_parse_rejects_malformed_frames(raw):
    with pytest.raises(ValidationError):
        parse_client_event(raw)


def test_parse_rejects_oversized_chat():
    raw = json.dumps({"type": "chat", "text": "x" * (MAX_MESSAGE_LENGTH + 1)})

    with pytest.raises(ValidationError):
        parse_client_event(raw)


def test_server_chat_event_has_timestamp():
    payload = json.loads(ChatMessageEvent(username="bob", text="hi").to_json())

    assert set(payload) == {"type", "username", "text", "timestamp"}
    assert payload["type"] == "chat"
    assert payload["timestamp"]


def test_user_left_serialization():
    event = UserLeftEvent(username="bob", message="bob left the room")

    assert json.loads(event.to_json()) == {
        "type": "user-left",
        "username": "bob",
        "message": "bob left the room",
    }


def test_session_lifecycle():
    session = Session()
    assert not session.active

    session.start("R1", "alice")
    assert session.active
    assert session.joined_at.tzinfo is not None

    session.clear()
    assert (session.room_id, session.username, session.joined_at) == (None, None, None)


def test_room_snapshot_excludes_one_member():
    first, second = object(), object()
    room = Room(room_id="R1", members={first, second})

    assert room.snapshot(exclude=first) == [second]
    assert len(room.snapshot()) == 2


def test_room_to_dict():
    room = Room(room_id="R1", members={object()})
    room.add_message()

    data = room.to_dict()

    assert data["room_id"] == "R1"
    assert data["member_count"] == 1
    assert data["message_count"] == 1
    assert data["created_at"].endswith("+00:00")
    assert data["last_activity"].endswith("+00:00")
