# livechat/services/session.py

from __future__ import annotations

import asyncio
import enum
import uuid
from typing import TYPE_CHECKING, Any, Optional

from fastapi import WebSocket

from livechat.core.logging import get_logger

if TYPE_CHECKING:
    from livechat.services.room_registry import Room

logger = get_logger(__name__)


class SessionState(enum.Enum):
    CONNECTED = "connected"
    IN_ROOM = "in_room"
    DISCONNECTED = "disconnected"


# ============================================================================
# PER-CONNECTION SESSION
# ============================================================================

class Session:
    """
    Server-side state for one WebSocket connection.

    A session carries the display name and room it joined, plus an outbound
    queue. Registries never write to the socket themselves: they call
    ``deliver()``, which only enqueues, and the session's writer task sends
    frames in the exact order they were enqueued.

    Frame format:
        {"type": "<event>", "data": <payload>}

    Lifecycle:
        CONNECTED -> IN_ROOM (first successful join) -> DISCONNECTED
        CONNECTED -> DISCONNECTED (never joined)
    """

    def __init__(self, websocket: Optional[WebSocket] = None) -> None:
        self.id = str(uuid.uuid4())
        self.websocket = websocket
        self.name: Optional[str] = None
        self.room: Optional["Room"] = None
        self.state = SessionState.CONNECTED
        self._outbox: asyncio.Queue = asyncio.Queue()
        self._writer: Optional[asyncio.Task] = None

    def __repr__(self) -> str:
        return f"<Session {self.id[:8]} name={self.name!r} state={self.state.value}>"

    @property
    def in_room(self) -> bool:
        return self.state is SessionState.IN_ROOM

    def enter(self, room: "Room", name: str) -> None:
        self.room = room
        self.name = name
        self.state = SessionState.IN_ROOM

    def deliver(self, event: str, data: Any) -> None:
        """Queue an outbound event. Dropped once the session is gone."""
        if self.state is SessionState.DISCONNECTED:
            return
        self._outbox.put_nowait({"type": event, "data": data})

    def start(self) -> None:
        """Spawn the writer task draining the outbox to the websocket."""
        if self._writer is None and self.websocket is not None:
            self._writer = asyncio.create_task(self._write_loop())

    async def _write_loop(self) -> None:
        while True:
            frame = await self._outbox.get()
            try:
                await self.websocket.send_json(frame)
            except Exception as e:
                # Socket is going away; the receive loop handles cleanup
                logger.warning("Send error for %r: %s", self, e)
                return

    async def close(self) -> None:
        """Mark the session disconnected and stop its writer."""
        self.state = SessionState.DISCONNECTED
        self.room = None
        if self._writer is not None:
            self._writer.cancel()
            try:
                await self._writer
            except asyncio.CancelledError:
                pass
            self._writer = None
