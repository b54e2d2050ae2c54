# livechat/main.py

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from livechat.core.config import Settings, settings as default_settings
from livechat.core.logging import setup_logging, get_logger
from livechat.core.state import ChatState
from livechat.api.routes import root, health, metrics, rooms, uploads
from livechat.api import websocket as websocket_module

# Configure logging first
setup_logging()
logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI app around a fresh ChatState.

    Args:
        settings: Overrides for tests; defaults to the environment settings
    """
    settings = settings or default_settings
    chat = ChatState(settings)

    app = FastAPI(title="livechat")
    app.state.chat = chat

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # REST routes
    app.include_router(root.router)
    app.include_router(health.router)
    app.include_router(metrics.router)
    app.include_router(rooms.router)
    app.include_router(uploads.router)

    # WebSocket routes
    app.include_router(websocket_module.router)

    # Stored blobs
    app.mount("/uploads", StaticFiles(directory=chat.uploads.directory), name="uploads")
    app.mount("/stickers", StaticFiles(directory=chat.sticker_store.directory), name="stickers")

    @app.on_event("startup")
    async def startup_event():
        logger.info("🚀 Application starting - rooms, stickers and schedules enabled")
        chat.load()

    @app.on_event("shutdown")
    async def on_shutdown():
        await chat.shutdown()
        logger.info("Application stopped")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("livechat.main:app", host=default_settings.HOST, port=default_settings.PORT)
