"""
Logging configuration for the Room Relay server
"""

import logging
import re
import sys
from typing import Optional
from .constants import LOG_LEVEL, CONTROL_CHARS_PATTERN


class SanitizingFormatter(logging.Formatter):
    """Formatter that keeps peer-supplied text on a single log line"""

    def format(self, record):
        message = super().format(record)
        # Usernames, room ids and chat text come from the network
        return re.sub(CONTROL_CHARS_PATTERN, '?', message)


def get_logger(name: str = "room_relay") -> logging.Logger:
    """
    Get a logger instance with the relay's formatting

    Args:
        name: Logger name

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(SanitizingFormatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))

        logger.addHandler(handler)
        logger.setLevel(LOG_LEVEL)

        # Prevent duplicate lines through the root logger
        logger.propagate = False

    return logger


def log_connection_event(connection_id: str, action: str, username: str = "", room_id: str = ""):
    """
    Log connection lifecycle events (connect/join/leave/disconnect)

    Args:
        connection_id: Connection identifier
        action: What happened
        username: Session username, if any
        room_id: Session room, if any
    """
    logger = get_logger()
    logger.info(f"CONNECTION_EVENT: {action} | conn={connection_id} | user={username} | room={room_id}")


def log_room_event(room_id: str, action: str, details: str = ""):
    """
    Log room lifecycle and fan-out events

    Args:
        room_id: Room identifier
        action: Action (created/deleted/broadcast)
        details: Additional details
    """
    logger = get_logger()
    logger.info(f"ROOM_EVENT: {action} | room={room_id} | {details}")


def log_protocol_event(event_type: str, details: dict, logger: Optional[logging.Logger] = None):
    """
    Log rejected or dropped inbound events with structured data

    Args:
        event_type: Kind of protocol problem
        details: Event details
        logger: Logger instance (optional)
    """
    if logger is None:
        logger = get_logger()

    logger.warning(f"PROTOCOL_EVENT: {event_type} | {details}")


def log_websocket_event(event_type: str, connection_id: str, details: str = ""):
    """Log transport-level events at debug level"""
    logger = get_logger()
    logger.debug(f"WEBSOCKET_EVENT: {event_type} | conn={connection_id} | {details}")


def log_system_event(event_type: str, details: str, level: str = "info"):
    """
    Log system-level events

    Args:
        event_type: Type of system event
        details: Event details
        level: Log level (info/warning/error)
    """
    logger = get_logger()
    log_message = f"SYSTEM_EVENT: {event_type} | {details}"

    if level == "warning":
        logger.warning(log_message)
    elif level == "error":
        logger.error(log_message)
    else:
        logger.info(log_message)
