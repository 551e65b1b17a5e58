"""Room membership and event routing core."""

from .models import Delivery, DisconnectResult, JoinResult, LeaveResult
from .registry import RoomRegistry
from .router import EventRouter

__all__ = [
    "Delivery",
    "DisconnectResult",
    "EventRouter",
    "JoinResult",
    "LeaveResult",
    "RoomRegistry",
]
