"""WebSocket signaling server."""

import asyncio
import contextlib
import email.utils
import json
import time
import uuid
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Any

import websockets
from websockets.asyncio.server import ServerConnection
from websockets.datastructures import Headers
from websockets.exceptions import ConnectionClosed, WebSocketException
from websockets.http11 import Request, Response

from signalroom.core.registry import RoomRegistry
from signalroom.core.router import EventRouter
from signalroom.logger import logger
from .events import SignalEnvelope, SystemEvents, create_error, create_event
from .outbound import OutboundChannel
from .utils import close_websocket_safely, get_websocket_info


class SignalingWebSocketServer:
    """Signaling relay server.

    - One OutboundChannel per connection (single writer, best-effort)
    - Registry owned here and shared with the router by reference
    - Transport liveness via websocket ping/pong; a dead peer ends its
      handler, which triggers disconnect cleanup
    """

    def __init__(
        self,
        host: str = "0.0.0.0",
        port: int = 4000,
        *,
        registry: RoomRegistry | None = None,
        max_room_size: int = 0,
        ping_interval: float | None = 25,
        ping_timeout: float | None = 20,
        max_message_size: int = 1024 * 1024,
    ):
        self.host = host
        self.port = port
        self.ping_interval = ping_interval
        self.ping_timeout = ping_timeout
        self.max_message_size = max_message_size
        self.registry = registry if registry is not None else RoomRegistry(max_room_size)
        self.router = EventRouter(self.registry, send=self.send_to)
        self.connections: dict[str, ServerConnection] = {}
        self.outbounds: dict[str, OutboundChannel] = {}
        self.running = False
        self.started_at = time.monotonic()
        self.shutdown_event = asyncio.Event()
        self._server = None

    async def handle_connection(self, websocket: ServerConnection, path: str | None = None):
        """Handle one websocket connection from accept to disconnect."""
        connection_id = str(uuid.uuid4())
        self.connections[connection_id] = websocket

        outbound = OutboundChannel(websocket, name=f"conn-{connection_id}")
        outbound.start()
        self.outbounds[connection_id] = outbound

        info = get_websocket_info(websocket)
        logger.info(f"User connected: {connection_id} from {info['remote_address']}")

        try:
            await self.send_to(
                connection_id,
                create_event(SystemEvents.CONNECTED, {"connectionId": connection_id}),
            )

            async for message in websocket:
                await self._handle_message(connection_id, message)

        except ConnectionClosed:
            logger.debug(f"WebSocket connection closed: {connection_id}")
        except WebSocketException as e:
            logger.error(f"WebSocket error for {connection_id}: {e}")
        finally:
            await self._cleanup_connection(connection_id)

    async def _handle_message(self, connection_id: str, message: str | bytes) -> None:
        try:
            envelope = SignalEnvelope.model_validate(json.loads(message))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"JSON decode error from {connection_id}: {e}")
            await self.send_to(connection_id, create_error(f"Invalid JSON: {e!s}"))
            return
        except ValueError as e:
            logger.warning(f"Malformed envelope from {connection_id}: {e}")
            await self.send_to(
                connection_id, create_error("Message must be an object with an 'event' field")
            )
            return

        try:
            await self.router.handle(connection_id, envelope.event, envelope.data)
        except Exception as e:
            logger.exception(f"Error handling {envelope.event} from {connection_id}: {e}")
            await self.send_to(
                connection_id, create_error(f"Message handling error: {e!s}", envelope.event)
            )

    async def send_to(self, connection_id: str, event: dict[str, Any]) -> None:
        """Queue an event for one connection; unknown connections are skipped."""
        outbound = self.outbounds.get(connection_id)
        if outbound is None:
            logger.debug(f"Dropping {event.get('event')} for departed connection {connection_id}")
            return
        await outbound.enqueue(event)

    async def _cleanup_connection(self, connection_id: str) -> None:
        """Remove the connection from its rooms and tell the peers it left."""
        websocket = self.connections.pop(connection_id, None)
        if websocket is not None:
            info = get_websocket_info(websocket)
            logger.info(f"User disconnected: {connection_id} (close code {info.get('close_code')})")
        outbound = self.outbounds.pop(connection_id, None)
        if outbound is not None:
            with contextlib.suppress(Exception):
                await outbound.close()

        await self.router.handle_disconnect(connection_id)
        logger.info(
            f"Cleaned up connection {connection_id} | Active rooms: {self.registry.room_count()}"
        )

    async def start_server(self) -> None:
        """Serve until shutdown() is called."""
        if self.running:
            logger.warning("Server is already running")
            return

        self.running = True
        self.started_at = time.monotonic()
        self.shutdown_event.clear()

        try:
            async with websockets.serve(
                self.handle_connection,
                self.host,
                self.port,
                process_request=self.process_http_request,
                ping_interval=self.ping_interval,
                ping_timeout=self.ping_timeout,
                max_size=self.max_message_size,
            ) as server:
                self._server = server
                logger.info(f"Signaling server running on ws://{self.host}:{self.port}")
                await self.shutdown_event.wait()
        except Exception as e:
            logger.exception(f"Server error: {e}")
            raise
        finally:
            self._server = None
            self.running = False
            logger.info("Signaling server stopped")

    async def shutdown(self) -> None:
        """Close every connection and stop the serve loop."""
        logger.info("Shutting down signaling server...")
        self.running = False

        for websocket in list(self.connections.values()):
            await close_websocket_safely(websocket)

        for outbound in list(self.outbounds.values()):
            with contextlib.suppress(Exception):
                await outbound.close()

        self.shutdown_event.set()

    def process_http_request(self, connection: ServerConnection, request: Request) -> Response | None:
        """Answer plain ``GET /`` and ``GET /health`` on the signaling port.

        Upgrade requests and every other path go on to the websocket
        handshake.
        """
        if request.headers.get("Upgrade", "").lower() == "websocket":
            return None

        path = request.path.split("?", 1)[0]
        if path == "/":
            payload = self.status_snapshot()
        elif path == "/health":
            payload = self.health_snapshot()
        else:
            return None

        logger.debug(f"HTTP GET {path} from {connection.remote_address}")
        body = payload.model_dump_json().encode()
        headers = Headers()
        headers["Date"] = email.utils.formatdate(usegmt=True)
        headers["Connection"] = "close"
        headers["Content-Type"] = "application/json"
        headers["Content-Length"] = str(len(body))
        return Response(HTTPStatus.OK.value, HTTPStatus.OK.phrase, headers, body)

    def status_snapshot(self):
        from signalroom.api.models import StatusResponse

        return StatusResponse(
            activeRooms=self.registry.room_count(),
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    def health_snapshot(self):
        from signalroom.api.models import HealthResponse

        return HealthResponse(uptime=self.uptime())

    def uptime(self) -> float:
        return time.monotonic() - self.started_at

    def get_status(self) -> dict[str, Any]:
        return {
            "running": self.running,
            "host": self.host,
            "port": self.port,
            "total_connections": len(self.connections),
            "active_rooms": self.registry.room_count(),
            "joined_connections": self.registry.connection_count(),
            "uptime": self.uptime(),
            "server_time": datetime.now().isoformat(),
            "outbound_queues": {cid: ch.queue.qsize() for cid, ch in self.outbounds.items()},
        }
