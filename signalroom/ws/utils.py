"""Helpers for inspecting and closing server-side websocket connections."""

from typing import Any, Dict

from websockets.asyncio.server import ServerConnection

from ..logger import logger


def is_websocket_closed(websocket: ServerConnection) -> bool:
    """True once the connection can no longer carry frames.

    Test doubles expose a boolean ``closed``; a real ServerConnection only
    sets ``close_code`` after the closing handshake.
    """
    closed = getattr(websocket, "closed", None)
    if isinstance(closed, bool):
        return closed
    return getattr(websocket, "close_code", None) is not None


async def close_websocket_safely(websocket: ServerConnection) -> None:
    try:
        if not is_websocket_closed(websocket):
            await websocket.close()
    except Exception as e:
        logger.debug(f"Error closing websocket: {e}")


def get_websocket_info(websocket: ServerConnection) -> Dict[str, Any]:
    """Peer address and close state, for connect/disconnect log lines."""
    return {
        "remote_address": getattr(websocket, "remote_address", None),
        "closed": is_websocket_closed(websocket),
        "close_code": getattr(websocket, "close_code", None),
    }
