"""API response models."""

from typing import Dict, List

from pydantic import BaseModel, Field


class StatusResponse(BaseModel):
    status: str = "ok"
    message: str = "Signaling server is running"
    activeRooms: int = Field(..., description="Number of rooms with at least one member")
    timestamp: str


class HealthResponse(BaseModel):
    status: str = "healthy"
    uptime: float = Field(..., description="Seconds since the signaling server started")


class RoomsResponse(BaseModel):
    activeRooms: int
    activeConnections: int
    rooms: Dict[str, List[str]] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    error: str
    detail: str = ""
