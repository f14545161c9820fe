"""
Data models for the Room Relay: sessions, rooms and wire events
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Annotated, Any, Dict, List, Literal, Optional, Set, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .constants import MAX_MESSAGE_LENGTH, TIMESTAMP_FORMAT


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Session:
    """Per-connection state, set when a join is accepted"""
    room_id: Optional[str] = None
    username: Optional[str] = None
    joined_at: Optional[datetime] = None

    @property
    def active(self) -> bool:
        return self.room_id is not None

    def start(self, room_id: str, username: str):
        self.room_id = room_id
        self.username = username
        self.joined_at = _utcnow()

    def clear(self):
        self.room_id = None
        self.username = None
        self.joined_at = None


@dataclass
class Room:
    """A live room; only exists while it has members"""
    room_id: str
    # Handles hash by identity
    members: Set[Any] = field(default_factory=set)
    created_at: datetime = field(default_factory=_utcnow)
    message_count: int = 0
    last_activity: datetime = field(default_factory=_utcnow)

    @property
    def member_count(self) -> int:
        return len(self.members)

    def snapshot(self, exclude: Any = None) -> List[Any]:
        """Copy of the member set for fan-out, optionally without one handle"""
        return [member for member in self.members if member is not exclude]

    def update_activity(self):
        self.last_activity = _utcnow()

    def add_message(self):
        self.message_count += 1
        self.update_activity()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            "room_id": self.room_id,
            "member_count": self.member_count,
            "created_at": self.created_at.isoformat(),
            "message_count": self.message_count,
            "last_activity": self.last_activity.isoformat(),
        }


class WireEvent(BaseModel):
    """Base for every event that crosses the connection"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


# client -> server

class JoinEvent(WireEvent):
    type: Literal["join"] = "join"
    room_id: Optional[str] = Field(default=None, alias="roomId")
    username: str = ""


class ChatEvent(WireEvent):
    type: Literal["chat"] = "chat"
    text: str = Field(max_length=MAX_MESSAGE_LENGTH)


ClientEvent = Annotated[Union[JoinEvent, ChatEvent], Field(discriminator="type")]

_client_event_adapter = TypeAdapter(ClientEvent)


def parse_client_event(raw: Union[str, bytes]) -> Union[JoinEvent, ChatEvent]:
    """
    Decode one inbound frame into a typed event

    Raises:
        pydantic.ValidationError: invalid JSON, unknown type or bad fields
    """
    return _client_event_adapter.validate_json(raw)


# server -> client

class RoomInfoEvent(WireEvent):
    type: Literal["room-info"] = "room-info"
    room_id: str = Field(alias="roomId")
    member_count: int = Field(alias="memberCount")


class UserJoinedEvent(WireEvent):
    type: Literal["user-joined"] = "user-joined"
    username: str
    message: str


class UserLeftEvent(WireEvent):
    type: Literal["user-left"] = "user-left"
    username: str
    message: str


class ChatMessageEvent(WireEvent):
    type: Literal["chat"] = "chat"
    username: str
    text: str
    timestamp: str = Field(default_factory=lambda: datetime.now().strftime(TIMESTAMP_FORMAT))


ServerEvent = Union[RoomInfoEvent, UserJoinedEvent, UserLeftEvent, ChatMessageEvent]
