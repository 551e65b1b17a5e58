"""WebSocket transport for the signaling relay."""

from .events import RelayEvents
from .events import RoomEvents
from .events import SignalEnvelope
from .events import SystemEvents
from .outbound import OutboundChannel
from .utils import close_websocket_safely
from .utils import get_websocket_info
from .utils import is_websocket_closed

__all__ = [
    "OutboundChannel",
    "RelayEvents",
    "RoomEvents",
    "SignalEnvelope",
    "SystemEvents",
    "close_websocket_safely",
    "get_websocket_info",
    "is_websocket_closed",
]
