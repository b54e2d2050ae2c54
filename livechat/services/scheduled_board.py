# livechat/services/scheduled_board.py

from __future__ import annotations

import asyncio
import uuid
from typing import List

from livechat.core.exceptions import ValidationError
from livechat.core.logging import get_logger
from livechat.models.models import ScheduledRoom
from livechat.services.connection_manager import ConnectionManager
from livechat.services.session import Session

logger = get_logger(__name__)


class ScheduledRoomBoard:
    """
    Announced future rooms shown on the landing page.

    Entries never expire on their own; they stay until someone removes them.
    Every change is broadcast globally as the full list ("scheduled-rooms").
    """

    def __init__(self, connection_manager: ConnectionManager) -> None:
        self.connection_manager = connection_manager
        self.scheduled: List[ScheduledRoom] = []
        self._lock = asyncio.Lock()

    def _snapshot(self) -> list:
        return [s.to_wire() for s in self.scheduled]

    async def publish(self, room: str, time: str) -> ScheduledRoom:
        """
        Announce a room.

        Raises:
            ValidationError: room name or time is empty
        """
        room = (room or "").strip()
        time = (time or "").strip()
        if not room or not time:
            raise ValidationError("Both room and time are required")

        entry = ScheduledRoom(room=room, time=time, id=str(uuid.uuid4()))
        async with self._lock:
            self.scheduled.append(entry)
            self.connection_manager.broadcast_all("scheduled-rooms", self._snapshot())

        logger.info("✓ Scheduled '%s' at %s", room, time)
        return entry

    async def remove(self, entry_id: str) -> bool:
        """Drop an entry by id. Unknown ids are ignored and nothing is sent."""
        async with self._lock:
            for index, entry in enumerate(self.scheduled):
                if entry.id == entry_id:
                    del self.scheduled[index]
                    self.connection_manager.broadcast_all("scheduled-rooms", self._snapshot())
                    break
            else:
                return False

        logger.info("✗ Unscheduled '%s'", entry.room)
        return True

    async def send_current(self, session: Session) -> None:
        async with self._lock:
            session.deliver("scheduled-rooms", self._snapshot())

    def __len__(self) -> int:
        return len(self.scheduled)
