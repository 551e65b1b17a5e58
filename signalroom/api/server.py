"""FastAPI server exposing health and room status for the signaling relay."""

from typing import List, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from signalroom.config import DEFAULT_CORS_ORIGINS
from signalroom.logger import logger
from signalroom.ws.server import SignalingWebSocketServer
from .models import ErrorResponse, HealthResponse, RoomsResponse, StatusResponse


class APIServer:
    """HTTP status surface backed by a running signaling server."""

    def __init__(
        self,
        signaling: SignalingWebSocketServer,
        cors_origins: Optional[List[str]] = None,
    ):
        self.signaling = signaling
        self._server = None
        self.app = FastAPI(
            title="Signalroom Status API",
            description="Health and room status for the WebRTC signaling relay",
            version="0.1.0",
        )

        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins or list(DEFAULT_CORS_ORIGINS),
            allow_credentials=True,
            allow_methods=["GET", "POST"],
            allow_headers=["Content-Type"],
        )

        self._register_routes()
        self._register_exception_handlers()

    def _register_exception_handlers(self):
        @self.app.exception_handler(Exception)
        async def general_exception_handler(request, exc):
            logger.error(f"API error: {exc}")
            return JSONResponse(
                status_code=500,
                content=ErrorResponse(error="Internal server error", detail=str(exc)).model_dump(),
            )

    def _register_routes(self):
        registry = self.signaling.registry

        @self.app.get("/", response_model=StatusResponse)
        async def status():
            return self.signaling.status_snapshot()

        @self.app.get("/health", response_model=HealthResponse)
        async def health_check():
            return self.signaling.health_snapshot()

        @self.app.get("/rooms", response_model=RoomsResponse)
        async def list_rooms():
            rooms = registry.snapshot()
            return RoomsResponse(
                activeRooms=len(rooms),
                activeConnections=sum(len(members) for members in rooms.values()),
                rooms=rooms,
            )

    async def start(self, host: str = "0.0.0.0", port: int = 4001):
        """Serve the API until stop() is called.

        Raises RuntimeError when uvicorn cannot bind.
        """
        import uvicorn

        config = uvicorn.Config(app=self.app, host=host, port=port, log_level="warning")
        self._server = uvicorn.Server(config)

        logger.info(f"Status API running on http://{host}:{port}")
        try:
            await self._server.serve()
        except SystemExit as e:
            # uvicorn exits the process on bind failure
            raise RuntimeError(f"Status API failed to start on {host}:{port}") from e

    def stop(self):
        if self._server is not None:
            self._server.should_exit = True
