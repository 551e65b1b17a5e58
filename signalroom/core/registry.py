"""Room registry mapping room ids to the connections joined to them."""

import threading
from typing import Dict, List, Optional

from signalroom.logger import logger
from .models import DisconnectResult, JoinResult, LeaveResult


class RoomRegistry:
    """Thread-safe in-memory room registry.

    Members are kept in an insertion-ordered dict used as a set, so member
    lists come back in join order. A reverse index (connection -> room) is
    updated together with every mutation. Empty rooms are deleted eagerly.
    """

    def __init__(self, max_room_size: int = 0):
        self.max_room_size = max_room_size
        self._rooms: Dict[str, Dict[str, None]] = {}
        self._room_of: Dict[str, str] = {}
        self._lock = threading.Lock()

    # ---------- mutations ---------- #

    def join(self, connection_id: str, room_id: str) -> Optional[JoinResult]:
        """Move a connection into a room, leaving its current room first.

        Returns None when the room is at capacity; the registry is unchanged.
        """
        with self._lock:
            current = self._room_of.get(connection_id)
            if current == room_id and connection_id in self._rooms.get(room_id, {}):
                members = list(self._rooms[room_id])
                return JoinResult(
                    room_id=room_id,
                    connection_id=connection_id,
                    size=len(members),
                    members=members,
                    added=False,
                )

            target = self._rooms.get(room_id)
            full = bool(self.max_room_size) and target is not None and len(target) >= self.max_room_size

            previous = current if current != room_id else None
            previous_members: List[str] = []
            previous_deleted = False
            if not full:
                if previous is not None:
                    previous_members, previous_deleted = self._discard(connection_id, previous)
                room = self._rooms.setdefault(room_id, {})
                room[connection_id] = None
                self._room_of[connection_id] = room_id
                members = list(room)

        if full:
            logger.warning(f"Room {room_id} is full (max {self.max_room_size}), rejecting {connection_id}")
            return None
        if previous_deleted:
            logger.info(f"Room {previous} cleaned up")
        return JoinResult(
            room_id=room_id,
            connection_id=connection_id,
            size=len(members),
            members=members,
            previous_room=previous,
            previous_room_members=previous_members,
            previous_room_deleted=previous_deleted,
        )

    def leave(self, connection_id: str, room_id: str) -> LeaveResult:
        """Remove a connection from a room; unknown ids are a no-op."""
        with self._lock:
            room = self._rooms.get(room_id)
            if room is None or connection_id not in room:
                return LeaveResult(
                    room_id=room_id,
                    connection_id=connection_id,
                    removed=False,
                    size=len(room) if room is not None else 0,
                    members=list(room or ()),
                )
            remaining, deleted = self._discard(connection_id, room_id)

        if deleted:
            logger.info(f"Room {room_id} cleaned up")
        return LeaveResult(
            room_id=room_id,
            connection_id=connection_id,
            removed=True,
            size=len(remaining),
            room_deleted=deleted,
            members=remaining,
        )

    def disconnect_all(self, connection_id: str) -> List[DisconnectResult]:
        """Remove a connection from every room it belongs to."""
        results: List[DisconnectResult] = []
        with self._lock:
            # Indexed room first, then a sweep in case the index ever drifted.
            candidates = []
            indexed = self._room_of.get(connection_id)
            if indexed is not None:
                candidates.append(indexed)
            candidates.extend(
                room_id for room_id, members in self._rooms.items()
                if room_id != indexed and connection_id in members
            )

            for room_id in candidates:
                if connection_id not in self._rooms.get(room_id, {}):
                    continue
                remaining, deleted = self._discard(connection_id, room_id)
                results.append(
                    DisconnectResult(
                        room_id=room_id,
                        connection_id=connection_id,
                        room_deleted=deleted,
                        members=remaining,
                    )
                )
            self._room_of.pop(connection_id, None)

        for result in results:
            if result.room_deleted:
                logger.info(f"Room {result.room_id} cleaned up")
        return results

    def _discard(self, connection_id: str, room_id: str):
        """Remove a member and clean up. Caller must hold the lock."""
        room = self._rooms.get(room_id, {})
        room.pop(connection_id, None)
        if self._room_of.get(connection_id) == room_id:
            del self._room_of[connection_id]
        if not room:
            self._rooms.pop(room_id, None)
            return [], True
        return list(room), False

    # ---------- queries ---------- #

    def members(self, room_id: str) -> List[str]:
        with self._lock:
            return list(self._rooms.get(room_id, ()))

    def others(self, room_id: str, connection_id: str) -> List[str]:
        """Members of a room excluding the given connection."""
        with self._lock:
            return [cid for cid in self._rooms.get(room_id, ()) if cid != connection_id]

    def room_of(self, connection_id: str) -> Optional[str]:
        with self._lock:
            return self._room_of.get(connection_id)

    def size(self, room_id: str) -> int:
        with self._lock:
            return len(self._rooms.get(room_id, ()))

    def has_room(self, room_id: str) -> bool:
        with self._lock:
            return room_id in self._rooms

    def room_count(self) -> int:
        with self._lock:
            return len(self._rooms)

    def connection_count(self) -> int:
        with self._lock:
            return sum(len(members) for members in self._rooms.values())

    def snapshot(self) -> Dict[str, List[str]]:
        with self._lock:
            return {room_id: list(members) for room_id, members in self._rooms.items()}
