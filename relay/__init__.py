"""
Room Relay core
In-memory room registry and broadcast relay behind swappable WebSocket transports
"""

from .models import (
    Session,
    Room,
    JoinEvent,
    ChatEvent,
    RoomInfoEvent,
    UserJoinedEvent,
    UserLeftEvent,
    ChatMessageEvent,
    parse_client_event,
)
from .validators import validate_room_id, sanitize_username, validate_username, generate_room_id
from .connection import ConnectionHandle, StarletteConnection, WebsocketsConnection
from .room_registry import RoomRegistry
from .message_handler import MessageHandler
from .heartbeat import HeartbeatMonitor
from .constants import *
from .logger import (
    get_logger,
    log_connection_event,
    log_room_event,
    log_protocol_event,
    log_websocket_event,
    log_system_event,
)

__all__ = [
    'Session',
    'Room',
    'JoinEvent',
    'ChatEvent',
    'RoomInfoEvent',
    'UserJoinedEvent',
    'UserLeftEvent',
    'ChatMessageEvent',
    'parse_client_event',
    'validate_room_id',
    'sanitize_username',
    'validate_username',
    'generate_room_id',
    'ConnectionHandle',
    'StarletteConnection',
    'WebsocketsConnection',
    'RoomRegistry',
    'MessageHandler',
    'HeartbeatMonitor',
    'get_logger',
    'log_connection_event',
    'log_room_event',
    'log_protocol_event',
    'log_websocket_event',
    'log_system_event',
]
