# livechat/api/routes/rooms.py

from fastapi import APIRouter, Depends, HTTPException

from livechat.core.state import ChatState, get_chat_state
from livechat.models.models import RoomInfo, RoomsResponse

router = APIRouter()

# ============================================================================
# LIVE ROOM ENDPOINTS
# ============================================================================

@router.get("/rooms", response_model=RoomsResponse)
async def list_rooms(chat: ChatState = Depends(get_chat_state)):
    """
    List every room that currently has members.

    Rooms only exist while someone is in them, so this is also the list of
    rooms a newcomer can walk into and find people.
    """
    return RoomsResponse(rooms=chat.room_registry.rooms_info())


@router.get("/rooms/{room_name}", response_model=RoomInfo)
async def get_room(room_name: str, chat: ChatState = Depends(get_chat_state)):
    """
    Get member and message counts of one live room.

    Raises:
        HTTPException: 404 if nobody is in the room
    """
    for info in chat.room_registry.rooms_info():
        if info.name == room_name:
            return info
    raise HTTPException(status_code=404, detail="Room not found")
