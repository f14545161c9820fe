"""
Input validation for join requests
"""

import re
import secrets
from typing import Any, Container, Tuple
from .constants import (
    CONTROL_CHARS_PATTERN,
    ERROR_MESSAGES,
    MAX_ROOM_ID_LENGTH,
    MAX_USERNAME_LENGTH,
    ROOM_ID_ALPHABET,
    ROOM_ID_LENGTH,
)
from .logger import log_protocol_event


def validate_room_id(room_id: Any) -> Tuple[bool, str]:
    """
    Validate a client-supplied room id

    An empty id is valid here; the registry replaces it with a generated one.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if room_id is None or room_id == "":
        return True, ""

    if not isinstance(room_id, str):
        log_protocol_event("invalid_room_id_type", {"room_id": str(room_id)})
        return False, ERROR_MESSAGES["invalid_room_id"]

    if len(room_id) > MAX_ROOM_ID_LENGTH:
        log_protocol_event("invalid_room_id_length", {"length": len(room_id)})
        return False, ERROR_MESSAGES["invalid_room_id"]

    if re.search(CONTROL_CHARS_PATTERN, room_id):
        log_protocol_event("invalid_room_id_format", {"room_id": room_id})
        return False, ERROR_MESSAGES["invalid_room_id"]

    return True, ""


def sanitize_username(username: Any) -> str:
    """
    Sanitize a display name for safe broadcasting

    Args:
        username: Raw username input

    Returns:
        Sanitized username, possibly empty
    """
    if not isinstance(username, str):
        return ""

    sanitized = re.sub(CONTROL_CHARS_PATTERN, '', username)
    return sanitized[:MAX_USERNAME_LENGTH]


def validate_username(username: str) -> Tuple[bool, str]:
    """Check a sanitized username is usable"""
    if not username.strip():
        log_protocol_event("invalid_username", {"username": username})
        return False, ERROR_MESSAGES["invalid_username"]
    return True, ""


def generate_room_id(existing: Container[str] = (), length: int = ROOM_ID_LENGTH) -> str:
    """
    Generate a short base-36 room id that is not in use

    Args:
        existing: Room ids currently live
        length: Number of characters

    Returns:
        New room id
    """
    while True:
        candidate = ''.join(secrets.choice(ROOM_ID_ALPHABET) for _ in range(length))
        if candidate not in existing:
            return candidate
