"""Outbound message channels for per-connection single-writer sending.

Every message for a websocket connection is written by exactly one writer
task, so fan-out from many peers never calls websocket.send() concurrently.
Enqueueing never blocks the producer: a full queue or a closed channel drops
the event, matching best-effort signaling delivery.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

from websockets.asyncio.server import ServerConnection

from .utils import is_websocket_closed
from signalroom.logger import logger


class OutboundChannel:
    """Per-connection outbound channel with a single writer task."""

    def __init__(
        self,
        websocket: ServerConnection,
        *,
        maxsize: int = 256,
        name: str | None = None,
    ) -> None:
        self.websocket = websocket
        self.queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=maxsize)
        self._writer_task: asyncio.Task | None = None
        self._closed = False
        self.name = name or "outbound"
        self.dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        if self._writer_task is None or self._writer_task.done():
            self._writer_task = asyncio.create_task(self._writer(), name=f"{self.name}-writer")

    async def enqueue(self, event: dict[str, Any]) -> bool:
        """Queue an event for sending. Returns False if it was dropped."""
        if self._closed:
            return False
        try:
            self.queue.put_nowait(event)
            return True
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(f"{self.name}: outbound queue full, dropping {event.get('event')}")
            return False

    async def drain(self) -> None:
        """Wait until every queued event has been written or dropped."""
        await self.queue.join()

    async def close(self) -> None:
        self._closed = True
        if self._writer_task is not None:
            self._writer_task.cancel()
            try:
                await self._writer_task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.debug(f"Error awaiting writer task close: {e}")
        while not self.queue.empty():
            self.queue.get_nowait()
            self.queue.task_done()

    async def _writer(self) -> None:
        """Single writer that sends all events on this connection."""
        try:
            while not self._closed:
                event = await self.queue.get()
                try:
                    if is_websocket_closed(self.websocket):
                        logger.debug(f"{self.name}: websocket closed, dropping {event.get('event')}")
                    else:
                        await self.websocket.send(json.dumps(event))
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    logger.debug(f"{self.name}: outbound send failed: {e}")
                finally:
                    self.queue.task_done()
        except asyncio.CancelledError:
            pass
