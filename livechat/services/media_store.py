# livechat/services/media_store.py

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import FrozenSet, List, Optional, Set

from fastapi.concurrency import run_in_threadpool

from livechat.core.exceptions import TooLargeError, WrongKindError
from livechat.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class MediaConstraints:
    max_size: int
    allowed_kinds: FrozenSet[str]


@dataclass(frozen=True)
class StoredMedia:
    url: str
    kind: str
    name: str


# ============================================================================
# DISK MEDIA STORE
# ============================================================================

class MediaStore:
    """
    Disk-backed blob store for chat attachments and stickers.

    Every blob lives directly in ``directory`` under a generated uuid name and
    is addressed by ``{url_prefix}/{name}``. The store only ever deletes files
    it could have written itself: URLs outside its prefix, or names that try
    to climb out of the directory, are ignored.

    Deletion comes in two flavours:
        - ``delete(url)`` removes the file now and never raises
        - ``discard(url)`` schedules ``delete`` as a detached task so the
          caller (room teardown, sticker removal) is not held up by disk I/O

    Usage:
        store = MediaStore("uploads", "/uploads", MediaConstraints(...))
        media = await store.store(blob, "image/png", "cat.png")
        store.discard(media.url)
    """

    def __init__(
        self,
        directory: str | Path,
        url_prefix: str,
        constraints: MediaConstraints,
        suffix: Optional[str] = None,
    ) -> None:
        self.directory = Path(directory)
        self.url_prefix = url_prefix.rstrip("/")
        self.constraints = constraints
        # Fixed extension for every stored blob; None keeps the upload's own
        self.suffix = suffix
        self._pending: Set[asyncio.Task] = set()

        self.directory.mkdir(parents=True, exist_ok=True)

    def classify(self, content_type: Optional[str]) -> str:
        """Map a MIME type onto an allowed kind or raise WrongKindError."""
        kind = (content_type or "").split("/", 1)[0].lower()
        if kind not in self.constraints.allowed_kinds:
            allowed = " and ".join(sorted(self.constraints.allowed_kinds))
            raise WrongKindError(f"Only {allowed} files are allowed")
        return kind

    async def store(
        self,
        blob: bytes,
        content_type: Optional[str],
        filename: Optional[str] = None,
    ) -> StoredMedia:
        kind = self.classify(content_type)
        if len(blob) > self.constraints.max_size:
            raise TooLargeError(
                f"File exceeds the {self.constraints.max_size} byte limit"
            )

        if self.suffix is not None:
            ext = self.suffix
        else:
            ext = PurePosixPath(filename or "").suffix
        name = f"{uuid.uuid4()}{ext}"

        await run_in_threadpool((self.directory / name).write_bytes, blob)
        logger.info("✓ Stored %s blob %s (%d bytes)", kind, name, len(blob))
        return StoredMedia(url=f"{self.url_prefix}/{name}", kind=kind, name=name)

    def path_for(self, url: str) -> Optional[Path]:
        """Resolve a URL of this store to a file path, or None if it isn't ours."""
        if not url or not url.startswith(self.url_prefix + "/"):
            return None
        name = url[len(self.url_prefix) + 1:]
        if not name or name != PurePosixPath(name).name or name in (".", ".."):
            return None
        return self.directory / name

    def list_stored(self) -> List[str]:
        """Names of blobs already on disk, oldest first."""
        files = [p for p in self.directory.iterdir() if p.is_file()]
        if self.suffix is not None:
            files = [p for p in files if p.suffix == self.suffix]
        files.sort(key=lambda p: (p.stat().st_mtime, p.name))
        return [p.name for p in files]

    def url_for(self, name: str) -> str:
        return f"{self.url_prefix}/{name}"

    async def delete(self, url: str) -> None:
        """Best-effort removal. Missing files and foreign URLs are ignored."""
        path = self.path_for(url)
        if path is None:
            logger.warning("Refusing to delete %r: not under %s", url, self.url_prefix)
            return
        try:
            await run_in_threadpool(path.unlink, True)
            logger.info("✗ Deleted blob %s", path.name)
        except OSError as e:
            logger.warning("Delete error for %s: %s", url, e)

    def discard(self, url: str) -> None:
        """Fire-and-forget ``delete``."""
        task = asyncio.create_task(self.delete(url))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """Wait for every scheduled deletion to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
