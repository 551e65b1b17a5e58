"""Data models for room membership results and outbound deliveries."""

from typing import Any, List, Optional

from pydantic import BaseModel, Field


class JoinResult(BaseModel):
    """Outcome of a join, including the room that was implicitly left."""

    room_id: str
    connection_id: str
    size: int
    members: List[str] = Field(default_factory=list)
    added: bool = True                          # False when already a member
    previous_room: Optional[str] = None
    previous_room_members: List[str] = Field(default_factory=list)
    previous_room_deleted: bool = False


class LeaveResult(BaseModel):
    """Outcome of an explicit leave."""

    room_id: str
    connection_id: str
    removed: bool
    size: int
    room_deleted: bool = False
    members: List[str] = Field(default_factory=list)  # Remaining members


class DisconnectResult(BaseModel):
    """One room a disconnecting connection was removed from."""

    room_id: str
    connection_id: str
    room_deleted: bool
    members: List[str] = Field(default_factory=list)  # Remaining members


class Delivery(BaseModel):
    """An outbound event addressed to explicit connection ids."""

    event: str
    data: Any = None
    targets: List[str] = Field(default_factory=list)

    def envelope(self) -> dict:
        return {"event": self.event, "data": self.data}
