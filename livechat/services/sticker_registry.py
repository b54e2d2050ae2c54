# livechat/services/sticker_registry.py

from __future__ import annotations

import asyncio
from pathlib import PurePosixPath
from typing import List, Optional

from livechat.core.logging import get_logger
from livechat.models.models import Sticker
from livechat.services.connection_manager import ConnectionManager
from livechat.services.media_store import MediaStore
from livechat.services.session import Session

logger = get_logger(__name__)


class StickerRegistry:
    """
    Process-wide, ordered sticker palette shared by every room.

    Any change is broadcast to all connected sessions as the full list
    ("stickers" event). New connections get the list on their own via
    ``send_current``.
    """

    def __init__(self, media_store: MediaStore, connection_manager: ConnectionManager) -> None:
        self.media_store = media_store
        self.connection_manager = connection_manager
        self.stickers: List[Sticker] = []
        self._lock = asyncio.Lock()

    def load_existing(self) -> None:
        """Seed the palette from sticker blobs already on disk."""
        self.stickers = [
            Sticker(id=PurePosixPath(name).stem, url=self.media_store.url_for(name))
            for name in self.media_store.list_stored()
        ]
        logger.info("✓ Loaded %d stickers from %s", len(self.stickers), self.media_store.directory)

    def _snapshot(self) -> list:
        return [s.to_wire() for s in self.stickers]

    async def add(self, blob: bytes, content_type: Optional[str], filename: Optional[str] = None) -> Sticker:
        """
        Store an image and append it to the palette.

        Raises:
            StorageError: the blob is too large or not an image; the palette
                is left untouched and nothing is broadcast
        """
        media = await self.media_store.store(blob, content_type, filename)
        sticker = Sticker(id=PurePosixPath(media.name).stem, url=media.url)

        async with self._lock:
            self.stickers.append(sticker)
            self.connection_manager.broadcast_all("stickers", self._snapshot())

        logger.info("✓ Added sticker %s (%d total)", sticker.id, len(self.stickers))
        return sticker

    async def remove(self, sticker_id: str) -> bool:
        """Remove a sticker and its blob. Unknown ids are ignored."""
        async with self._lock:
            removed = next((s for s in self.stickers if s.id == sticker_id), None)
            if removed is None:
                return False
            self.stickers.remove(removed)
            self.connection_manager.broadcast_all("stickers", self._snapshot())

        self.media_store.discard(removed.url)
        logger.info("✗ Removed sticker %s (%d total)", sticker_id, len(self.stickers))
        return True

    async def send_current(self, session: Session) -> None:
        async with self._lock:
            session.deliver("stickers", self._snapshot())

    def __len__(self) -> int:
        return len(self.stickers)
