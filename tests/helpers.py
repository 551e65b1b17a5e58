"""Test helper utilities."""

import asyncio
import json
import socket
from typing import Any, Dict, List, Optional


def find_free_port(start_port: int = 9000, end_port: int = 9100) -> Optional[int]:
    """Find a free port in the given range."""
    for port in range(start_port, end_port):
        try:
            with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
                sock.bind(("localhost", port))
                return port
        except OSError:
            continue
    return None


async def wait_for_condition(
    condition_func,
    timeout: float = 5.0,
    interval: float = 0.02,
    error_message: str = "Condition not met within timeout",
):
    """Wait for a condition to become true."""
    loop = asyncio.get_running_loop()
    start_time = loop.time()
    while loop.time() - start_time < timeout:
        if condition_func():
            return True
        await asyncio.sleep(interval)
    raise TimeoutError(error_message)


class FakeWebSocket:
    """In-memory stand-in for a server-side websocket connection."""

    def __init__(self):
        self.incoming: asyncio.Queue = asyncio.Queue()
        self.sent: List[Dict[str, Any]] = []
        self.closed = False
        self.close_code = None
        self.remote_address = ("127.0.0.1", 50000)

    def push(self, event: str, data: Any = None):
        self.incoming.put_nowait(json.dumps({"event": event, "data": data}))

    def push_raw(self, raw: str):
        self.incoming.put_nowait(raw)

    def hang_up(self):
        self.incoming.put_nowait(None)

    async def send(self, message: str):
        self.sent.append(json.loads(message))

    async def close(self):
        self.closed = True
        self.close_code = 1000
        self.hang_up()

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        while True:
            message = await self.incoming.get()
            if message is None:
                return
            yield message

    @property
    def connection_id(self) -> Optional[str]:
        for message in self.sent:
            if message["event"] == "connected":
                return message["data"]["connectionId"]
        return None

    def events(self) -> List[str]:
        return [m["event"] for m in self.sent]

    def of(self, event: str) -> List[Dict[str, Any]]:
        return [m for m in self.sent if m["event"] == event]
