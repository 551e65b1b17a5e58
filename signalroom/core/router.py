"""Event router translating inbound signaling events into deliveries."""

from collections.abc import Awaitable, Callable
from typing import Any, Dict, List, Optional

from signalroom.logger import logger
from signalroom.ws.events import (
    INBOUND_EVENTS,
    PayloadError,
    RoomEvents,
    create_error,
    parse_relay,
    parse_room_id,
)
from .models import Delivery
from .registry import RoomRegistry

SendFunc = Callable[[str, Dict[str, Any]], Awaitable[None]]


class EventRouter:
    """Routes events from one connection to the right set of room members.

    Registry mutations happen synchronously inside ``route``; the returned
    deliveries carry member snapshots and are sent afterwards, outside the
    registry lock.
    """

    def __init__(self, registry: RoomRegistry, send: Optional[SendFunc] = None):
        self.registry = registry
        self.send = send

    async def handle(self, connection_id: str, event: str, data: Any = None) -> List[Delivery]:
        """Route one inbound event and deliver the result."""
        try:
            deliveries = self.route(connection_id, event, data)
        except PayloadError as e:
            logger.warning(f"Rejected {e.event} from {connection_id}: {e}")
            deliveries = [self._error(connection_id, str(e), e.event)]
        await self.dispatch(deliveries)
        return deliveries

    async def handle_disconnect(self, connection_id: str) -> List[Delivery]:
        deliveries = self.disconnect(connection_id)
        await self.dispatch(deliveries)
        return deliveries

    def route(self, connection_id: str, event: str, data: Any = None) -> List[Delivery]:
        """Apply an inbound event to the registry and compute deliveries.

        Raises PayloadError for unknown events or malformed payloads.
        """
        if event not in INBOUND_EVENTS:
            raise PayloadError(event, f"Unknown event: {event}")
        if event == RoomEvents.JOIN:
            return self.join(connection_id, parse_room_id(event, data))
        if event == RoomEvents.LEAVE:
            return self.leave(connection_id, parse_room_id(event, data))
        room_id, fields = parse_relay(event, data)
        return self.relay(connection_id, event, room_id, fields)

    # ---------- membership ---------- #

    def join(self, connection_id: str, room_id: str) -> List[Delivery]:
        result = self.registry.join(connection_id, room_id)
        if result is None:
            return [self._error(connection_id, f"Room {room_id} is full", RoomEvents.JOIN)]

        logger.info(f"{connection_id} joined room {room_id} ({result.size} users)")
        deliveries: List[Delivery] = []

        if result.previous_room and result.previous_room_members:
            deliveries.append(
                Delivery(
                    event=RoomEvents.USER_LEFT,
                    data=connection_id,
                    targets=result.previous_room_members,
                )
            )

        others = [cid for cid in result.members if cid != connection_id]
        if result.added and others:
            deliveries.append(
                Delivery(event=RoomEvents.USER_JOINED, data=connection_id, targets=others)
            )

        deliveries.append(
            Delivery(
                event=RoomEvents.ROOM_USERS,
                data={"count": result.size, "users": result.members},
                targets=result.members,
            )
        )

        if result.added and result.size == 2:
            logger.info(f"Both users ready in room {room_id}, triggering ready-to-call")
            deliveries.append(
                Delivery(event=RoomEvents.READY_TO_CALL, targets=result.members)
            )

        return deliveries

    def leave(self, connection_id: str, room_id: str) -> List[Delivery]:
        result = self.registry.leave(connection_id, room_id)
        if not result.removed:
            logger.debug(f"{connection_id} is not in room {room_id}, nothing to leave")
            return []

        logger.info(f"{connection_id} left room {room_id} ({result.size} users)")
        if not result.members:
            return []
        return [Delivery(event=RoomEvents.USER_LEFT, data=connection_id, targets=result.members)]

    def disconnect(self, connection_id: str) -> List[Delivery]:
        deliveries: List[Delivery] = []
        for result in self.registry.disconnect_all(connection_id):
            logger.info(f"{connection_id} removed from room {result.room_id} on disconnect")
            if result.room_deleted or not result.members:
                continue
            deliveries.append(
                Delivery(event=RoomEvents.USER_LEFT, data=connection_id, targets=result.members)
            )
        return deliveries

    # ---------- relay ---------- #

    def relay(
        self, connection_id: str, event: str, room_id: str, fields: Dict[str, Any]
    ) -> List[Delivery]:
        targets = self.registry.others(room_id, connection_id)
        logger.debug(f"{event} from {connection_id} -> room {room_id} ({len(targets)} targets)")
        if not targets:
            return []
        return [Delivery(event=event, data={**fields, "from": connection_id}, targets=targets)]

    # ---------- delivery ---------- #

    async def dispatch(self, deliveries: List[Delivery]) -> int:
        """Hand deliveries to the transport. Returns the number of sends attempted."""
        if self.send is None:
            return 0
        sent = 0
        for delivery in deliveries:
            message = delivery.envelope()
            for target in delivery.targets:
                try:
                    await self.send(target, dict(message))
                    sent += 1
                except Exception as e:
                    logger.debug(f"Delivery of {delivery.event} to {target} failed: {e}")
        return sent

    @staticmethod
    def _error(connection_id: str, message: str, event: Optional[str]) -> Delivery:
        error = create_error(message, event)
        return Delivery(event=error["event"], data=error["data"], targets=[connection_id])
