# livechat/api/routes/uploads.py

from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from livechat.core.exceptions import StorageError
from livechat.core.logging import get_logger
from livechat.core.state import ChatState, get_chat_state
from livechat.models.models import Sticker, UploadResponse
from livechat.services.media_store import MediaStore

logger = get_logger(__name__)

router = APIRouter()

# ============================================================================
# MEDIA UPLOAD ENDPOINTS
# ============================================================================

async def read_capped(upload: UploadFile, store: MediaStore) -> bytes:
    """Read at most one byte past the store's limit so oversize is detectable."""
    return await upload.read(store.constraints.max_size + 1)


@router.post("/upload", response_model=UploadResponse)
async def upload_file(
    file: Optional[UploadFile] = File(None),
    chat: ChatState = Depends(get_chat_state),
):
    """
    Upload a chat attachment (image or video, 50 MiB by default).

    The returned URL goes into a "send-message" event as fileUrl. The blob
    lives until the room whose history references it is destroyed.

    Raises:
        HTTPException: 400 no file, 413 too large, 415 not image/video
    """
    if file is None:
        raise HTTPException(status_code=400, detail="No file uploaded")

    blob = await read_capped(file, chat.uploads)
    try:
        media = await chat.uploads.store(blob, file.content_type, file.filename)
    except StorageError as e:
        logger.info("Upload rejected (%s): %s", file.filename, e)
        raise HTTPException(status_code=e.status_code, detail=str(e))

    return UploadResponse(url=media.url, media_type=media.kind)


@router.post("/upload-sticker", response_model=Sticker)
async def upload_sticker(
    sticker: Optional[UploadFile] = File(None),
    chat: ChatState = Depends(get_chat_state),
):
    """
    Add an image to the global sticker palette (2 MiB by default).

    Side Effects:
        - Blob saved as /stickers/<id>.png
        - "stickers" event with the full palette sent to every client

    Raises:
        HTTPException: 400 no file, 413 too large, 415 not an image
    """
    if sticker is None:
        raise HTTPException(status_code=400, detail="No file uploaded")

    blob = await read_capped(sticker, chat.sticker_store)
    try:
        return await chat.sticker_registry.add(blob, sticker.content_type, sticker.filename)
    except StorageError as e:
        logger.info("Sticker rejected (%s): %s", sticker.filename, e)
        raise HTTPException(status_code=e.status_code, detail=str(e))
