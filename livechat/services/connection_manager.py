# livechat/services/connection_manager.py

from __future__ import annotations

from typing import Any, Dict, Iterable

from fastapi import WebSocket

from livechat.core.logging import get_logger
from livechat.services.session import Session

logger = get_logger(__name__)

# ============================================================================
# WEBSOCKET CONNECTION MANAGER
# ============================================================================

class ConnectionManager:
    """
    Tracks every live session and fans events out to them.

    Room membership is NOT kept here: the room registry owns it, so that
    member counts and history live in one consistency domain. This class is
    only the broadcast transport with two primitives:

        send_to(sessions, event, data)   -> "send to room"
        broadcast_all(event, data)       -> "send to all"

    Both are synchronous and non-blocking: they enqueue on each session's
    outbox and return. Callers hold their own registry lock while calling
    them, which pins broadcast order to mutation order.

    Data Structures:
        sessions: Maps session id -> Session
                  Example: {"3f2a...": <Session name='alice'>}
    """

    def __init__(self) -> None:
        self.sessions: Dict[str, Session] = {}

    async def connect(self, websocket: WebSocket) -> Session:
        """
        Accept a WebSocket connection and register a session for it.

        The session is not in any room yet; it must send "join-room".
        """
        await websocket.accept()

        session = Session(websocket)
        self.register(session)
        session.start()
        return session

    def register(self, session: Session) -> None:
        self.sessions[session.id] = session
        logger.info("✓ Session %s connected. Total: %d", session.id[:8], len(self.sessions))

    def disconnect(self, session: Session) -> None:
        if self.sessions.pop(session.id, None) is not None:
            logger.info("✗ Session %s disconnected. Total: %d", session.id[:8], len(self.sessions))

    def send_to(self, sessions: Iterable[Session], event: str, data: Any) -> None:
        for session in sessions:
            session.deliver(event, data)

    def broadcast_all(self, event: str, data: Any) -> None:
        logger.debug("📨 Broadcasting %s to %d sessions", event, len(self.sessions))
        self.send_to(list(self.sessions.values()), event, data)

    def __len__(self) -> int:
        return len(self.sessions)
