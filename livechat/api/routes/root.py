# livechat/api/routes/root.py

from fastapi import APIRouter

router = APIRouter()


@router.get("/")
async def root():
    """
    Root endpoint - API information.

    Returns basic info about the service and where its endpoints live.
    """
    return {
        "message": "livechat - rooms, presence and stickers",
        "version": "1.0",
        "features": ["rooms", "presence", "attachments", "stickers", "scheduled_rooms"],
        "endpoints": {
            "websocket": "/ws",
            "upload": "/upload",
            "upload_sticker": "/upload-sticker",
            "rooms": "/rooms",
            "health": "/health",
            "metrics": "/metrics",
        },
    }
