# livechat/api/routes/metrics.py
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from livechat.core.state import ChatState, get_chat_state

router = APIRouter()

@router.get("/metrics")
async def get_metrics(chat: ChatState = Depends(get_chat_state)):
    """
    Usage metrics endpoint.

    Returns:
        dict: Message statistics (total, messages/sec since start), capacity
        (connections, live rooms, members across rooms) and the busiest room.

    Example Response:
        {
            "total_messages": 1200,
            "uptime_hours": 5.5,
            "messages_per_second": 0.06,
            "concurrent_connections": 14,
            "active_rooms": 3,
            "members_in_rooms": 11,
            "busiest_room": {"name": "lobby", "memberCount": 7, "messageCount": 640}
        }
    """
    uptime_seconds = (datetime.now(timezone.utc) - chat.app_start_time).total_seconds()
    total_messages = chat.room_registry.messages_sent

    if uptime_seconds > 0:
        messages_per_second = total_messages / uptime_seconds
    else:
        messages_per_second = 0

    rooms = chat.room_registry.rooms_info()
    busiest = max(rooms, key=lambda r: r.member_count, default=None)

    return {
        # Statistics
        "total_messages": total_messages,
        "uptime_hours": round(uptime_seconds / 3600, 2) if uptime_seconds > 0 else 0,
        "messages_per_second": round(messages_per_second, 2),

        # Capacity
        "concurrent_connections": len(chat.connection_manager),
        "active_rooms": len(rooms),
        "members_in_rooms": sum(r.member_count for r in rooms),
        "busiest_room": busiest.to_wire() if busiest else None,

        # Global boards
        "stickers": len(chat.sticker_registry),
        "scheduled_rooms": len(chat.scheduled_board),
    }
