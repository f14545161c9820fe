"""
Room registry and broadcast relay
"""

import asyncio
from typing import Any, Dict, List, Optional, Tuple
from .connection import ConnectionHandle
from .constants import ERROR_MESSAGES, JOINED_MESSAGE, LEFT_MESSAGE, ROOM_ID_LENGTH
from .logger import get_logger, log_connection_event, log_room_event
from .models import ChatMessageEvent, Room, RoomInfoEvent, UserJoinedEvent, UserLeftEvent
from .validators import generate_room_id, sanitize_username, validate_room_id, validate_username

logger = get_logger()


class RoomRegistry:
    """
    Owns room id -> Room and every membership change

    One instance per process, handed to each connection handler. Every
    mutation and fan-out runs under ``_lock``. Sends only enqueue, so the
    lock is never held across transport I/O.
    """

    def __init__(self, room_id_length: int = ROOM_ID_LENGTH):
        self._rooms: Dict[str, Room] = {}
        self._room_id_length = room_id_length
        self._lock = asyncio.Lock()

    async def join(self, connection: ConnectionHandle, room_id: Optional[str], username: str) -> Tuple[bool, str, str]:
        """
        Add a connection to a room, creating the room if needed

        Args:
            connection: Joining connection
            room_id: Requested room; empty or None generates a new id
            username: Display name

        Returns:
            Tuple of (success, room_id, error_message)
        """
        async with self._lock:
            session = connection.session
            if session.active:
                # One room per connection: keep the current one and resend its info
                room = self._rooms.get(session.room_id)
                count = room.member_count if room else 0
                connection.send(RoomInfoEvent(room_id=session.room_id, member_count=count))
                log_connection_event(connection.connection_id, "rejoin_rejected", session.username, session.room_id)
                return False, session.room_id, ERROR_MESSAGES["already_joined"]

            is_valid, error_msg = validate_room_id(room_id)
            if not is_valid:
                return False, "", error_msg

            clean_username = sanitize_username(username)
            is_valid, error_msg = validate_username(clean_username)
            if not is_valid:
                return False, "", error_msg

            if not room_id:
                room_id = generate_room_id(self._rooms, self._room_id_length)

            room = self._rooms.get(room_id)
            if room is None:
                room = Room(room_id=room_id)
                self._rooms[room_id] = room
                log_room_event(room_id, "created")

            room.members.add(connection)
            room.update_activity()
            session.start(room_id, clean_username)

            notice = UserJoinedEvent(
                username=clean_username,
                message=JOINED_MESSAGE.format(username=clean_username),
            )
            for member in room.snapshot(exclude=connection):
                member.send(notice)

            connection.send(RoomInfoEvent(room_id=room_id, member_count=room.member_count))

            log_connection_event(connection.connection_id, "join", clean_username, room_id)
            return True, room_id, ""

    async def broadcast(self, connection: ConnectionHandle, text: str) -> int:
        """
        Relay a chat message to every member of the sender's room, sender included

        Returns:
            Number of members the message was queued for
        """
        async with self._lock:
            session = connection.session
            if not session.active:
                log_connection_event(connection.connection_id, "chat_before_join")
                return 0

            room = self._rooms.get(session.room_id)
            if room is None:
                return 0

            event = ChatMessageEvent(username=session.username, text=text)
            recipients = 0
            for member in room.snapshot():
                if member.is_open() and member.send(event):
                    recipients += 1

            room.add_message()
            log_room_event(room.room_id, "broadcast", f"from={session.username} recipients={recipients}")
            return recipients

    async def leave(self, connection: ConnectionHandle) -> bool:
        """
        Remove a connection from its room

        Safe to call any number of times; only the first call after a join
        has an effect.

        Returns:
            True if a membership was removed
        """
        async with self._lock:
            session = connection.session
            if not session.active:
                return False

            room_id, username = session.room_id, session.username
            session.clear()

            room = self._rooms.get(room_id)
            if room is None or connection not in room.members:
                return False

            room.members.discard(connection)
            log_connection_event(connection.connection_id, "leave", username, room_id)

            if not room.members:
                del self._rooms[room_id]
                log_room_event(room_id, "deleted", "empty")
                return True

            room.update_activity()
            notice = UserLeftEvent(username=username, message=LEFT_MESSAGE.format(username=username))
            for member in room.snapshot():
                member.send(notice)
            return True

    def member_count(self, room_id: str) -> int:
        """Live member count; 0 for a room that does not exist"""
        room = self._rooms.get(room_id)
        return room.member_count if room else 0

    def has_room(self, room_id: str) -> bool:
        return room_id in self._rooms

    async def get_all_rooms_info(self) -> List[Dict[str, Any]]:
        """Snapshot of every live room"""
        async with self._lock:
            return [room.to_dict() for room in self._rooms.values()]

    async def get_connection_stats(self) -> Dict[str, int]:
        """
        Get overall connection statistics

        Returns:
            Dictionary with connection stats
        """
        async with self._lock:
            return {
                "total_clients": sum(room.member_count for room in self._rooms.values()),
                "total_rooms": len(self._rooms),
            }
