# livechat/core/state.py
from __future__ import annotations

from datetime import datetime, timezone

from fastapi.requests import HTTPConnection

from livechat.core.config import Settings
from livechat.services.connection_manager import ConnectionManager
from livechat.services.media_store import MediaConstraints, MediaStore
from livechat.services.room_registry import RoomRegistry
from livechat.services.scheduled_board import ScheduledRoomBoard
from livechat.services.sticker_registry import StickerRegistry


class ChatState:
    """
    Everything one application instance shares between connections.

    Built once by ``create_app`` and stored on ``app.state.chat``; routes
    reach it through the ``get_chat_state`` dependency instead of importing
    module-level singletons.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

        self.uploads = MediaStore(
            settings.UPLOADS_DIR,
            "/uploads",
            MediaConstraints(settings.MAX_UPLOAD_BYTES, frozenset({"image", "video"})),
        )
        self.sticker_store = MediaStore(
            settings.STICKERS_DIR,
            "/stickers",
            MediaConstraints(settings.MAX_STICKER_BYTES, frozenset({"image"})),
            suffix=".png",
        )

        self.connection_manager = ConnectionManager()
        self.room_registry = RoomRegistry(self.connection_manager, self.uploads)
        self.sticker_registry = StickerRegistry(self.sticker_store, self.connection_manager)
        self.scheduled_board = ScheduledRoomBoard(self.connection_manager)

        self.app_start_time: datetime = datetime.now(timezone.utc)

    def load(self) -> None:
        self.sticker_registry.load_existing()

    async def shutdown(self) -> None:
        await self.uploads.drain()
        await self.sticker_store.drain()


def get_chat_state(connection: HTTPConnection) -> ChatState:
    """FastAPI dependency: the ChatState of the app serving this request."""
    return connection.app.state.chat
