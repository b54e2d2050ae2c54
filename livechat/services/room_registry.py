# livechat/services/room_registry.py

from __future__ import annotations

import asyncio
from typing import Dict, List, Optional, Set

from livechat.core.exceptions import StateError, ValidationError
from livechat.core.logging import get_logger
from livechat.models.models import (
    Message,
    RoomInfo,
    SendMessageRequest,
    SystemMessage,
    UserMessage,
)
from livechat.services.connection_manager import ConnectionManager
from livechat.services.media_store import MediaStore
from livechat.services.session import Session, SessionState

logger = get_logger(__name__)


class Room:
    """Membership and message history of one named room."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.members: Set[Session] = set()
        self.history: List[Message] = []
        self.lock = asyncio.Lock()
        # Set once the last member left; a closed room is never reused
        self.closed = False

    def __repr__(self) -> str:
        return f"<Room {self.name!r} members={len(self.members)} messages={len(self.history)}>"

    def attachment_urls(self) -> List[str]:
        return [
            msg.file_url
            for msg in self.history
            if isinstance(msg, UserMessage) and msg.file_url
        ]


# ============================================================================
# ROOM REGISTRY
# ============================================================================

class RoomRegistry:
    """
    Owns every live room: who is in it and what has been said.

    A room springs into existence on the first join and is destroyed, along
    with its history and the attachment blobs its messages reference, as soon
    as its last member leaves. Empty rooms are never kept.

    Locking:
        _lock      guards the name -> Room map
        room.lock  guards one room's members and history

        Lock order is room.lock -> _lock (leave unmaps a closed room while
        still holding the room lock). join takes them one after the other,
        never nested, and retries when it lands on a room that closed in
        between.

    Every broadcast is enqueued while the room lock is held, so each member
    sees events in history order.

    Usage:
        registry = RoomRegistry(connection_manager, uploads_store)
        history = await registry.join(session, "lobby", "alice")
        await registry.send(session, SendMessageRequest(text="hi"))
        await registry.leave(session)
    """

    def __init__(self, connection_manager: ConnectionManager, media_store: MediaStore) -> None:
        self.connection_manager = connection_manager
        self.media_store = media_store
        self.rooms: Dict[str, Room] = {}
        self.messages_sent = 0
        self._lock = asyncio.Lock()

    def __contains__(self, room_name: str) -> bool:
        return room_name in self.rooms

    def __len__(self) -> int:
        return len(self.rooms)

    async def _get_or_create(self, room_name: str) -> Room:
        async with self._lock:
            room = self.rooms.get(room_name)
            # A leave interrupted before unmapping can leave a closed room behind
            if room is None or room.closed:
                room = Room(room_name)
                self.rooms[room_name] = room
                logger.info("✓ Created room '%s'", room_name)
            return room

    def _broadcast(self, room: Room, event: str, data) -> None:
        self.connection_manager.send_to(room.members, event, data)

    def _append(self, room: Room, message: Message) -> None:
        room.history.append(message)
        self._broadcast(room, "message", message.to_wire())

    async def join(self, session: Session, room_name: str, display_name: str) -> List[Message]:
        """
        Add a session to a room, creating the room if needed.

        Process:
            1. Send the current history to the joiner only
            2. Append and broadcast "<name> joined the room"
            3. Broadcast the new member count

        Returns:
            The history as it was before the join notice

        Raises:
            ValidationError: empty room or display name
            StateError: the session already joined a room
        """
        if not room_name or not display_name:
            raise ValidationError("Both room and name are required")
        if session.state is not SessionState.CONNECTED:
            raise StateError("Session has already joined a room")

        while True:
            room = await self._get_or_create(room_name)
            async with room.lock:
                if room.closed:
                    continue

                room.members.add(session)
                session.enter(room, display_name)

                history = list(room.history)
                session.deliver("chat-history", [msg.to_wire() for msg in history])

                self._append(room, SystemMessage(text=f"{display_name} joined the room"))
                self._broadcast(room, "user-count", len(room.members))

                logger.info("→ %s joined '%s' (%d members)", display_name, room_name, len(room.members))
                return history

    async def send(self, session: Session, request: SendMessageRequest) -> Optional[UserMessage]:
        """
        Append a user message to the session's room and broadcast it.

        Silent no-op (returns None) when the session has no current room or
        its room is already gone.
        """
        room = session.room
        if room is None or not session.in_room:
            return None

        async with room.lock:
            if room.closed or session not in room.members:
                return None

            message = UserMessage(
                name=session.name,
                text=request.text or "",
                file_url=request.file_url or None,
                media_type=request.media_type,
                sticker_url=request.sticker_url or None,
            )
            self._append(room, message)
            self.messages_sent += 1
            return message

    async def leave(self, session: Session) -> None:
        """
        Remove a session from its room.

        Process:
            1. Drop the session from the member set
            2. Append and broadcast "<name> left the room"
            3. Broadcast the new member count
            4. If nobody is left, unmap the room and discard its attachments
        """
        room = session.room
        if room is None:
            return

        attachments: List[str] = []
        async with room.lock:
            if session not in room.members:
                return

            room.members.discard(session)
            self._append(room, SystemMessage(text=f"{session.name} left the room"))
            self._broadcast(room, "user-count", len(room.members))
            logger.info("← %s left '%s' (%d members)", session.name, room.name, len(room.members))

            if not room.members:
                room.closed = True
                attachments = [
                    url for url in room.attachment_urls()
                    if not self._referenced_elsewhere(url, room)
                ]
                async with self._lock:
                    if self.rooms.get(room.name) is room:
                        del self.rooms[room.name]
                logger.info(
                    "✗ Destroyed empty room '%s' (%d messages, %d attachments)",
                    room.name, len(room.history), len(attachments),
                )

        for url in attachments:
            self.media_store.discard(url)

    def _referenced_elsewhere(self, url: str, room: Room) -> bool:
        """True if another live room still has a message pointing at url."""
        return any(
            url in other.attachment_urls()
            for other in list(self.rooms.values())
            if other is not room and not other.closed
        )

    def member_count(self, room_name: str) -> int:
        room = self.rooms.get(room_name)
        return len(room.members) if room else 0

    def get_history(self, room_name: str) -> List[Message]:
        room = self.rooms.get(room_name)
        return list(room.history) if room else []

    def rooms_info(self) -> List[RoomInfo]:
        """Snapshot of every live room, used by the /rooms and /health routes."""
        return [
            RoomInfo(name=room.name, member_count=len(room.members), message_count=len(room.history))
            for room in list(self.rooms.values())
            if not room.closed
        ]
