"""Unit tests for SignalingWebSocketServer with in-memory websockets."""

import asyncio
import json
from unittest.mock import MagicMock

import pytest
from websockets.datastructures import Headers
from websockets.http11 import Request

from signalroom.ws.server import SignalingWebSocketServer
from tests.helpers import FakeWebSocket, wait_for_condition


async def connect(server: SignalingWebSocketServer):
    ws = FakeWebSocket()
    task = asyncio.create_task(server.handle_connection(ws))
    await wait_for_condition(lambda: ws.connection_id is not None, timeout=1)
    return ws, task


@pytest.mark.unit
class TestSignalingWebSocketServer:

    @pytest.mark.asyncio
    async def test_connect_sends_connection_id(self):
        server = SignalingWebSocketServer()
        ws, task = await connect(server)

        assert ws.connection_id in server.connections
        assert server.get_status()["total_connections"] == 1

        ws.hang_up()
        await asyncio.wait_for(task, timeout=1)
        assert server.connections == {}
        assert server.outbounds == {}

    @pytest.mark.asyncio
    async def test_join_offer_and_disconnect(self):
        server = SignalingWebSocketServer()
        a, task_a = await connect(server)
        b, task_b = await connect(server)

        a.push("join-room", "r1")
        await wait_for_condition(lambda: server.registry.size("r1") == 1, timeout=1)
        b.push("join-room", "r1")
        await wait_for_condition(lambda: a.of("ready-to-call") and b.of("ready-to-call"), timeout=1)

        users = [a.connection_id, b.connection_id]
        assert a.of("room-users")[-1]["data"] == {"count": 2, "users": users}
        assert b.of("room-users")[-1]["data"] == {"count": 2, "users": users}
        assert a.of("user-joined") == [{"event": "user-joined", "data": b.connection_id}]

        a.push("offer", {"roomId": "r1", "offer": {"sdp": "X"}})
        await wait_for_condition(lambda: b.of("offer"), timeout=1)
        assert b.of("offer")[0]["data"] == {"offer": {"sdp": "X"}, "from": a.connection_id}
        assert a.of("offer") == []

        b.hang_up()
        await asyncio.wait_for(task_b, timeout=1)
        await wait_for_condition(lambda: a.of("user-left"), timeout=1)
        assert a.of("user-left")[0]["data"] == b.connection_id
        assert server.registry.size("r1") == 1

        a.hang_up()
        await asyncio.wait_for(task_a, timeout=1)
        assert server.registry.room_count() == 0

    @pytest.mark.asyncio
    async def test_invalid_json_gets_error(self):
        server = SignalingWebSocketServer()
        ws, task = await connect(server)

        ws.push_raw("{not json")
        ws.push_raw('["join-room", "r1"]')
        await wait_for_condition(lambda: len(ws.of("error")) == 2, timeout=1)

        assert "Invalid JSON" in ws.of("error")[0]["data"]["message"]
        assert server.registry.room_count() == 0

        ws.hang_up()
        await asyncio.wait_for(task, timeout=1)

    @pytest.mark.asyncio
    async def test_room_full_error(self):
        server = SignalingWebSocketServer(max_room_size=1)
        a, task_a = await connect(server)
        b, task_b = await connect(server)

        a.push("join-room", "r1")
        await wait_for_condition(lambda: a.of("room-users"), timeout=1)
        b.push("join-room", "r1")
        await wait_for_condition(lambda: b.of("error"), timeout=1)

        assert b.of("error")[0]["data"]["event"] == "join-room"
        assert server.registry.members("r1") == [a.connection_id]

        a.hang_up()
        b.hang_up()
        await asyncio.gather(task_a, task_b)

    @pytest.mark.asyncio
    async def test_send_to_unknown_connection_is_noop(self):
        server = SignalingWebSocketServer()
        await server.send_to("ghost", {"event": "offer", "data": None})

    @pytest.mark.asyncio
    async def test_shutdown_closes_connections(self):
        server = SignalingWebSocketServer()
        ws, task = await connect(server)

        await server.shutdown()
        await asyncio.wait_for(task, timeout=1)

        assert ws.closed
        assert server.shutdown_event.is_set()
        assert server.connections == {}

    # ==================== HTTP on the signaling port ====================

    def test_health_request_answered_with_json(self):
        server = SignalingWebSocketServer()
        connection = MagicMock(remote_address=("127.0.0.1", 40000))

        response = server.process_http_request(connection, Request("/health", Headers()))

        assert response.status_code == 200
        assert response.headers["Content-Type"] == "application/json"
        assert int(response.headers["Content-Length"]) == len(response.body)
        body = json.loads(response.body)
        assert body["status"] == "healthy"
        assert body["uptime"] >= 0

    def test_root_request_reports_active_rooms(self):
        server = SignalingWebSocketServer()
        server.registry.join("a", "r1")
        connection = MagicMock(remote_address=("127.0.0.1", 40000))

        response = server.process_http_request(connection, Request("/?from=uptime-check", Headers()))

        body = json.loads(response.body)
        assert body["status"] == "ok"
        assert body["message"] == "Signaling server is running"
        assert body["activeRooms"] == 1

    def test_upgrade_and_other_paths_go_to_handshake(self):
        server = SignalingWebSocketServer()
        connection = MagicMock(remote_address=("127.0.0.1", 40000))
        upgrade = Headers({"Upgrade": "websocket", "Connection": "Upgrade"})

        assert server.process_http_request(connection, Request("/", upgrade)) is None
        assert server.process_http_request(connection, Request("/rooms", Headers())) is None
