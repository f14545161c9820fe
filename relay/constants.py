"""
Configuration constants for the Room Relay server
"""

import os
import string

# Network settings
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 3001))
WEBSOCKET_PATH = os.getenv("WEBSOCKET_PATH", "/ws")

# Logging levels
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Liveness check (seconds)
HEARTBEAT_INTERVAL = float(os.getenv("HEARTBEAT_INTERVAL", 30))
HEARTBEAT_TIMEOUT = float(os.getenv("HEARTBEAT_TIMEOUT", 10))

# Room ids
ROOM_ID_LENGTH = 9
ROOM_ID_ALPHABET = string.digits + string.ascii_uppercase
MAX_ROOM_ID_LENGTH = 64

# Payload limits
MAX_USERNAME_LENGTH = 32
MAX_MESSAGE_LENGTH = 2000

# Per-connection outbound queue
OUTBOX_MAX_SIZE = 256

# Locale time of day, e.g. "14:05:09"
TIMESTAMP_FORMAT = "%X"

CONTROL_CHARS_PATTERN = r'[\x00-\x1F\x7F]'

# Security headers
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")
CORS_ALLOW_CREDENTIALS = False

# Error messages
ERROR_MESSAGES = {
    "invalid_room_id": f"Room id must be 1-{MAX_ROOM_ID_LENGTH} characters without control characters",
    "invalid_username": f"Username must be 1-{MAX_USERNAME_LENGTH} characters",
    "already_joined": "Already joined a room",
}

# Notification text
JOINED_MESSAGE = "{username} joined the room"
LEFT_MESSAGE = "{username} left the room"
