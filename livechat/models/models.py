# livechat/models/models.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

MediaKind = Literal["image", "video"]


def now_ms() -> int:
    """Current UTC time as integer milliseconds since the epoch."""
    return int(datetime.now(timezone.utc).timestamp() * 1000)


class CamelModel(BaseModel):
    """Snake_case fields on the Python side, camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


# ============================================================================
# ROOM HISTORY
# ============================================================================

class SystemMessage(CamelModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["system"] = "system"
    text: str
    timestamp: int = Field(default_factory=now_ms)


class UserMessage(CamelModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["user"] = "user"
    name: str
    text: str = ""
    file_url: Optional[str] = None
    media_type: Optional[MediaKind] = None
    sticker_url: Optional[str] = None
    timestamp: int = Field(default_factory=now_ms)


Message = Union[SystemMessage, UserMessage]


# ============================================================================
# GLOBAL BOARDS
# ============================================================================

class Sticker(CamelModel):
    id: str
    url: str


class ScheduledRoom(CamelModel):
    room: str
    time: str
    id: str


# ============================================================================
# INBOUND PAYLOADS
# ============================================================================

class JoinRoomRequest(CamelModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    room: str = Field(min_length=1)
    name: str = Field(min_length=1)


class SendMessageRequest(CamelModel):
    text: Optional[str] = None
    file_url: Optional[str] = None
    media_type: Optional[MediaKind] = None
    sticker_url: Optional[str] = None


class PublishRoomRequest(CamelModel):
    room: str = ""
    time: str = ""


class RemoveByIdRequest(CamelModel):
    id: str


# ============================================================================
# HTTP RESPONSES
# ============================================================================

class UploadResponse(CamelModel):
    url: str
    media_type: MediaKind


class RoomInfo(CamelModel):
    name: str
    member_count: int
    message_count: int


class RoomsResponse(CamelModel):
    rooms: List[RoomInfo]
