import os
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv(".env")

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:3001",
    "http://127.0.0.1:3000",
    "https://plag-detector-next-psi.vercel.app",
]


def _split_origins(raw: str) -> List[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


class Settings(BaseModel):
    # Network
    host: str = Field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = Field(
        default_factory=lambda: int(os.getenv("PORT", "4000")),
        description="Signaling websocket port",
    )
    http_port: int = Field(
        default_factory=lambda: int(os.getenv("HTTP_PORT", "4001")),
        description="Health/status HTTP API port",
    )
    cors_origins: List[str] = Field(
        default_factory=lambda: _split_origins(os.getenv("CORS_ORIGINS", ""))
        or list(DEFAULT_CORS_ORIGINS)
    )

    # Rooms
    max_room_size: int = Field(
        default_factory=lambda: int(os.getenv("SIGNALROOM_MAX_ROOM_SIZE", "0")),
        description="Maximum members per room (0 = unlimited)",
    )

    # Transport liveness
    ping_interval: float = Field(
        default_factory=lambda: float(os.getenv("SIGNALROOM_PING_INTERVAL", "25"))
    )
    ping_timeout: float = Field(
        default_factory=lambda: float(os.getenv("SIGNALROOM_PING_TIMEOUT", "20"))
    )
    max_message_size: int = Field(
        default_factory=lambda: int(os.getenv("SIGNALROOM_MAX_MESSAGE_SIZE", str(1024 * 1024)))
    )

    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))


settings = Settings()
