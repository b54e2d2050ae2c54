import pytest
from fastapi.testclient import TestClient

from livechat.core.config import Settings
from livechat.main import create_app
from livechat.services.connection_manager import ConnectionManager
from livechat.services.media_store import MediaConstraints, MediaStore
from livechat.services.room_registry import RoomRegistry
from livechat.services.scheduled_board import ScheduledRoomBoard
from livechat.services.session import Session, SessionState
from livechat.services.sticker_registry import StickerRegistry


class RecordingSession(Session):
    """Session that keeps delivered events in a list instead of a socket."""

    def __init__(self):
        super().__init__()
        self.received = []

    def deliver(self, event, data):
        if self.state is SessionState.DISCONNECTED:
            return
        self.received.append((event, data))

    def events(self, name):
        return [data for event, data in self.received if event == name]

    def clear(self):
        self.received.clear()


@pytest.fixture
def settings(tmp_path):
    s = Settings()
    s.UPLOADS_DIR = str(tmp_path / "uploads")
    s.STICKERS_DIR = str(tmp_path / "stickers")
    s.MAX_UPLOAD_BYTES = 1024
    s.MAX_STICKER_BYTES = 256
    s.CORS_ORIGINS = ["*"]
    return s


@pytest.fixture
def connection_manager():
    return ConnectionManager()


@pytest.fixture
def uploads_store(tmp_path):
    return MediaStore(
        tmp_path / "uploads",
        "/uploads",
        MediaConstraints(1024, frozenset({"image", "video"})),
    )


@pytest.fixture
def sticker_store(tmp_path):
    return MediaStore(
        tmp_path / "stickers",
        "/stickers",
        MediaConstraints(256, frozenset({"image"})),
        suffix=".png",
    )


@pytest.fixture
def registry(connection_manager, uploads_store):
    return RoomRegistry(connection_manager, uploads_store)


@pytest.fixture
def stickers(sticker_store, connection_manager):
    return StickerRegistry(sticker_store, connection_manager)


@pytest.fixture
def board(connection_manager):
    return ScheduledRoomBoard(connection_manager)


@pytest.fixture
def make_session(connection_manager):
    def _make():
        session = RecordingSession()
        connection_manager.register(session)
        return session

    return _make


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    # Entering the client shares one event loop between all websockets
    with TestClient(app) as c:
        yield c
