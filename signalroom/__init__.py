"""
Signalroom - WebRTC signaling relay

Brokers offers, answers and ICE candidates, plus interview events
(transcripts, questions, answers, plagiarism scores), between the
participants of a shared room:
- Lock-guarded room registry with eager empty-room cleanup
- Event router with room-wide and others-only fan-out
- websockets transport with a FastAPI status surface
"""

from .config import settings
from .core import Delivery, EventRouter, RoomRegistry
from .logger import logger
from .ws.server import SignalingWebSocketServer

__version__ = "0.1.0"

__all__ = [
    "Delivery",
    "EventRouter",
    "RoomRegistry",
    "SignalingWebSocketServer",
    "logger",
    "settings",
]
