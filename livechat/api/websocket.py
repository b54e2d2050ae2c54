# livechat/api/websocket.py

from __future__ import annotations

import json
from typing import Any

import anyio
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from pydantic import ValidationError as PayloadError

from livechat.core.exceptions import StateError, ValidationError
from livechat.core.logging import get_logger
from livechat.core.state import ChatState, get_chat_state
from livechat.models.models import (
    JoinRoomRequest,
    PublishRoomRequest,
    RemoveByIdRequest,
    SendMessageRequest,
)
from livechat.services.session import Session

logger = get_logger(__name__)

router = APIRouter()

# ============================================================================
# WEBSOCKET ENDPOINT
# ============================================================================

@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket, chat: ChatState = Depends(get_chat_state)):
    """
    WebSocket endpoint carrying the chat event protocol.

    Protocol:
    =========

    Client -> Server Actions ({"action": "...", "data": {...}}):
    ------------------------------------------------------------
    Join Room:
        {"action": "join-room", "data": {"room": "lobby", "name": "alice"}}
        Response: "chat-history" to the joiner, then "message" and
                  "user-count" to the whole room

    Send Message:
        {"action": "send-message",
         "data": {"text": "hi", "fileUrl": "/uploads/x.png",
                  "mediaType": "image", "stickerUrl": null}}
        Response: "message" to the whole room (sender included)

    Publish Scheduled Room:
        {"action": "publish-room", "data": {"room": "Standup", "time": "10:00"}}
        Response: "scheduled-rooms" to everyone

    Remove Scheduled Room:
        {"action": "remove-scheduled", "data": {"id": "uuid-123"}}

    Remove Sticker:
        {"action": "remove-sticker", "data": {"id": "uuid-456"}}
        Response: "stickers" to everyone

    Server -> Client Events ({"type": "...", "data": ...}):
    -------------------------------------------------------
    chat-history     ordered list of messages, once, on join
    message          one message, on every append to the room history
    user-count       integer, on every membership change
    scheduled-rooms  full list, on connect and on change
    stickers         full list, on connect and on change
    error            {"message": "..."}, only to the offending client

    Lifecycle:
    ==========
    1. Connection accepted, session registered
    2. Scheduled rooms and stickers sent to this client only
    3. Client joins exactly one room
    4. On disconnect the session leaves its room (room destroyed if empty)
    """
    session = await chat.connection_manager.connect(websocket)
    await chat.scheduled_board.send_current(session)
    await chat.sticker_registry.send_current(session)

    try:
        while True:
            data = await websocket.receive_text()

            try:
                frame = json.loads(data)
                if not isinstance(frame, dict):
                    raise ValidationError("Frame must be a JSON object")
                action = frame.get("action")
                payload = frame.get("data") or {}
                logger.debug("Websocket input: Action: %s, Session: %r", action, session)

                await handle_action(chat, session, action, payload)

            except json.JSONDecodeError:
                session.deliver("error", {"message": "Invalid JSON"})
            except PayloadError as e:
                session.deliver("error", {"message": f"Invalid payload: {e.error_count()} error(s)"})
            except (ValidationError, StateError) as e:
                session.deliver("error", {"message": str(e)})

    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error("WebSocket error for %r: %s", session, e)
    finally:
        with anyio.CancelScope(shield=True):
            await disconnect_session(chat, session)


async def handle_action(chat: ChatState, session: Session, action: Any, payload: Any) -> None:
    """Route one inbound event to the registry that owns it."""
    if action == "join-room":
        request = JoinRoomRequest.model_validate(payload)
        await chat.room_registry.join(session, request.room, request.name)

    elif action == "send-message":
        request = SendMessageRequest.model_validate(payload)
        await chat.room_registry.send(session, request)

    elif action == "publish-room":
        request = PublishRoomRequest.model_validate(payload)
        await chat.scheduled_board.publish(request.room, request.time)

    elif action == "remove-scheduled":
        request = RemoveByIdRequest.model_validate(payload)
        await chat.scheduled_board.remove(request.id)

    elif action == "remove-sticker":
        request = RemoveByIdRequest.model_validate(payload)
        await chat.sticker_registry.remove(request.id)

    else:
        session.deliver("error", {"message": f"Unknown action: {action}"})


async def disconnect_session(chat: ChatState, session: Session) -> None:
    """Leave the room (if any), unregister, stop the writer."""
    if session.in_room:
        await chat.room_registry.leave(session)
    chat.connection_manager.disconnect(session)
    await session.close()
