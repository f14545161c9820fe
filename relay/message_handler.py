"""
Inbound event decoding and dispatch
"""

from typing import Optional, Union
from pydantic import ValidationError
from .connection import ConnectionHandle
from .heartbeat import HeartbeatMonitor
from .logger import get_logger, log_protocol_event
from .models import ChatEvent, JoinEvent, parse_client_event
from .room_registry import RoomRegistry

logger = get_logger()


class MessageHandler:
    """Turns raw frames from one connection into registry operations"""

    def __init__(self, registry: RoomRegistry, heartbeat: Optional[HeartbeatMonitor] = None):
        self.registry = registry
        self.heartbeat = heartbeat

    def attach(self, connection: ConnectionHandle):
        """
        Wire a new connection's disconnect notification to the registry

        Args:
            connection: Freshly accepted connection
        """
        connection.add_close_listener(self.registry.leave)
        if self.heartbeat is not None:
            self.heartbeat.track(connection)
            connection.add_close_listener(self.heartbeat.untrack)

    async def handle_message(self, connection: ConnectionHandle, raw: Union[str, bytes]) -> bool:
        """
        Handle one inbound frame

        Malformed frames are logged and dropped; the connection stays open.

        Returns:
            True if the frame decoded to a known event
        """
        connection.touch()

        try:
            event = parse_client_event(raw)
        except ValidationError as e:
            log_protocol_event("malformed_event", {
                "connection": connection.connection_id,
                "errors": [err["type"] for err in e.errors()],
            })
            return False

        if isinstance(event, JoinEvent):
            success, room_id, error_msg = await self.registry.join(connection, event.room_id, event.username)
            if not success:
                log_protocol_event("join_rejected", {
                    "connection": connection.connection_id,
                    "room_id": room_id,
                    "error": error_msg,
                })
        elif isinstance(event, ChatEvent):
            await self.registry.broadcast(connection, event.text)
        else:
            raise TypeError(f"Unhandled event type: {type(event).__name__}")

        return True
