# livechat/api/routes/health.py

from fastapi import APIRouter, Depends

from livechat.core.state import ChatState, get_chat_state

router = APIRouter()

@router.get("/health")
async def health(chat: ChatState = Depends(get_chat_state)):
    """
    Health check endpoint.

    Returns current system status plus connection, room, sticker and
    scheduled room counts. Used by container health probes and monitoring.
    """
    return {
        "status": "healthy",
        "connections": len(chat.connection_manager),
        "active_rooms": len(chat.room_registry),
        "stickers": len(chat.sticker_registry),
        "scheduled_rooms": len(chat.scheduled_board),
    }
