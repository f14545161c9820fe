from client_example import format_event


def test_format_chat():
    line = format_event({"type": "chat", "username": "bob", "text": "hi", "timestamp": "12:00:00"})

    assert "[12:00:00] bob: hi" in line


def test_format_room_info():
    assert "Room X7K2Q (2 members)" in format_event({"type": "room-info", "roomId": "X7K2Q", "memberCount": 2})


def test_format_notifications_use_server_message():
    assert "bob left the room" in format_event({"type": "user-left", "username": "bob", "message": "bob left the room"})


def test_format_unknown():
    assert "Unknown message type: mystery" in format_event({"type": "mystery"})
