# livechat/core/config.py
import os
from typing import List
from dotenv import load_dotenv

class Settings:
    """
    Setup environment variables.
        - HOST / PORT where uvicorn binds
        - UPLOADS_DIR directory holding chat attachments (served at /uploads)
        - STICKERS_DIR directory holding sticker images (served at /stickers)
        - MAX_UPLOAD_BYTES / MAX_STICKER_BYTES size caps for uploads
        - CORS_ORIGINS comma separated list of allowed origins
    """

    # Load environment variables from the .env file
    load_dotenv()

    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "3000"))

    UPLOADS_DIR: str = os.getenv("UPLOADS_DIR", "uploads")
    STICKERS_DIR: str = os.getenv("STICKERS_DIR", "stickers")

    MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(50 * 1024 * 1024)))
    MAX_STICKER_BYTES: int = int(os.getenv("MAX_STICKER_BYTES", str(2 * 1024 * 1024)))

    CORS_ORIGINS: List[str] = [
        origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()
    ]

settings = Settings()
