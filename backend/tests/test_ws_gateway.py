"""
Tests for the WebSocket gateway: connection registry, client protocol,
Redis message parsing and the /ws endpoint.
"""

import asyncio
import json
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError
from starlette.websockets import WebSocketDisconnect, WebSocketState

from shared.config.constants import Roles
from shared.infrastructure.events import Event, channel_for_room
from shared.security.auth import issue_user_token
from ws_gateway.connection_manager import ConnectionLimitError, ConnectionManager
from ws_gateway.main import app as gateway_app, dispatch_event, manager as gateway_manager
from ws_gateway.protocol import (
    JoinDenied,
    ProtocolError,
    parse_client_message,
    room_for_join,
    room_for_leave,
)
from ws_gateway import redis_subscriber
from ws_gateway.redis_subscriber import parse_message


class FakeWebSocket:
    """Minimal stand-in recording what the manager sends."""

    def __init__(self, fail_send: bool = False):
        self.client_state = WebSocketState.CONNECTING
        self.application_state = WebSocketState.CONNECTING
        self.sent: list[dict] = []
        self.closed_with: int | None = None
        self.fail_send = fail_send

    async def accept(self):
        self.client_state = WebSocketState.CONNECTED
        self.application_state = WebSocketState.CONNECTED

    async def send_json(self, payload):
        if self.fail_send:
            raise RuntimeError("socket gone")
        self.sent.append(payload)

    async def close(self, code: int = 1000, reason: str | None = None):
        self.closed_with = code
        self.client_state = WebSocketState.DISCONNECTED
        self.application_state = WebSocketState.DISCONNECTED


class TestConnectionManager:
    async def test_join_and_broadcast(self):
        manager = ConnectionManager(max_connections_per_user=3, heartbeat_timeout=60)
        diner, cook = FakeWebSocket(), FakeWebSocket()
        await manager.connect(diner)
        await manager.connect(cook, user_id=5)
        await manager.join(diner, "table:3")
        await manager.join(cook, "kitchen")

        assert await manager.send_to_room("table:3", {"type": "order-status-update"}) == 1
        assert diner.sent == [{"type": "order-status-update"}]
        assert cook.sent == []

    async def test_leave_stops_delivery(self):
        manager = ConnectionManager()
        ws = FakeWebSocket()
        await manager.connect(ws)
        await manager.join(ws, "table:3")
        await manager.leave(ws, "table:3")
        assert await manager.send_to_room("table:3", {"type": "x"}) == 0
        assert manager.rooms_of(ws) == set()

    async def test_failed_send_disconnects_socket(self):
        manager = ConnectionManager()
        good, bad = FakeWebSocket(), FakeWebSocket(fail_send=True)
        for ws in (good, bad):
            await manager.connect(ws)
            await manager.join(ws, "admin")

        assert await manager.send_to_room("admin", {"type": "new-order"}) == 1
        assert manager.total_connections == 1
        assert manager.get_stats()["rooms"] == {"admin": 1}

    async def test_per_user_connection_cap(self):
        manager = ConnectionManager(max_connections_per_user=2)
        await manager.connect(FakeWebSocket(), user_id=9)
        await manager.connect(FakeWebSocket(), user_id=9)
        third = FakeWebSocket()
        with pytest.raises(ConnectionLimitError):
            await manager.connect(third, user_id=9)
        assert third.closed_with == 1008
        assert manager.get_stats()["users_connected"] == 1

    async def test_anonymous_connections_are_not_capped(self):
        manager = ConnectionManager(max_connections_per_user=1)
        for _ in range(3):
            await manager.connect(FakeWebSocket())
        assert manager.total_connections == 3

    async def test_stale_connections_are_closed(self):
        manager = ConnectionManager(heartbeat_timeout=5)
        ws, fresh = FakeWebSocket(), FakeWebSocket()
        await manager.connect(ws)
        await manager.connect(fresh)
        await manager.join(ws, "kitchen")
        manager._last_heartbeat[ws] -= 10
        assert manager.get_stale_connections() == [ws]
        assert await manager.cleanup_stale_connections() == 1
        assert ws.closed_with == 1001
        assert manager.total_connections == 1
        assert manager.get_stats()["rooms"] == {}

    async def test_shutdown_refuses_new_connections(self):
        manager = ConnectionManager()
        ws = FakeWebSocket()
        await manager.connect(ws)
        assert await manager.shutdown() == 1
        with pytest.raises(ConnectionError):
            await manager.connect(FakeWebSocket())


class TestProtocol:
    def test_plain_ping(self):
        assert parse_client_message("ping") == {"type": "ping"}

    @pytest.mark.parametrize("raw", ["{", "[]", '{"type": 3}'])
    def test_malformed_messages(self, raw):
        with pytest.raises(ProtocolError):
            parse_client_message(raw)

    def test_anyone_can_join_a_table(self):
        assert room_for_join({"type": "join-table", "tableNumber": 7}, None) == "table:7"

    def test_table_number_validated(self):
        with pytest.raises(ProtocolError):
            room_for_join({"type": "join-table", "tableNumber": 0}, None)
        with pytest.raises(ProtocolError):
            room_for_join({"type": "join-table"}, Roles.CUSTOMER)

    def test_staff_rooms_need_capabilities(self):
        assert room_for_join({"type": "join-kitchen"}, Roles.KITCHEN_STAFF) == "kitchen"
        assert room_for_join({"type": "join-admin"}, Roles.MANAGER) == "admin"
        with pytest.raises(JoinDenied):
            room_for_join({"type": "join-kitchen"}, None)
        with pytest.raises(JoinDenied):
            room_for_join({"type": "join-kitchen"}, Roles.CUSTOMER)
        with pytest.raises(JoinDenied):
            room_for_join({"type": "join-admin"}, Roles.KITCHEN_STAFF)

    def test_unknown_type(self):
        with pytest.raises(ProtocolError):
            room_for_join({"type": "join-everything"}, Roles.ADMIN)

    def test_leave_requires_known_room(self):
        assert room_for_leave({"type": "leave", "room": "kitchen"}) == "kitchen"
        with pytest.raises(ProtocolError):
            room_for_leave({"type": "leave", "room": "lobby"})


class TestSubscriberParsing:
    def _message(self, room: str, event: Event) -> dict:
        return {"type": "pmessage", "channel": channel_for_room(room).encode(), "data": event.to_json()}

    def test_valid_message(self):
        event = Event(type="new-order", room="kitchen", data={"orderId": 3})
        room, parsed = parse_message(self._message("kitchen", event))
        assert room == "kitchen"
        assert parsed.data == {"orderId": 3}

    def test_subscription_confirmations_ignored(self):
        assert parse_message({"type": "psubscribe", "channel": "vibedine:room:*", "data": 1}) is None

    def test_room_mismatch_dropped(self):
        event = Event(type="new-order", room="admin")
        assert parse_message(self._message("kitchen", event)) is None

    def test_garbage_dropped(self):
        msg = {"type": "pmessage", "channel": "vibedine:room:kitchen", "data": "{oops"}
        assert parse_message(msg) is None

    async def test_dispatch_forwards_client_message(self):
        ws = FakeWebSocket()
        await gateway_manager.connect(ws)
        await gateway_manager.join(ws, "table:8")
        try:
            event = Event(type="order-status-update", room="table:8", data={"orderId": 1, "status": "ready"})
            await dispatch_event("table:8", event)
            assert ws.sent == [event.to_client_message()]
        finally:
            await gateway_manager.disconnect(ws)


class FlakyPubSub:
    """Subscribes fine, delivers one message, then loses the connection."""

    def __init__(self, message: dict):
        self._message = message

    async def psubscribe(self, pattern):
        pass

    async def listen(self):
        yield self._message
        raise RedisConnectionError("connection reset")

    async def punsubscribe(self, pattern):
        pass

    async def aclose(self):
        pass


class TestSubscriberReconnect:
    async def test_recovered_drops_do_not_exhaust_retries(self, monkeypatch):
        event = Event(type="new-order", room="kitchen", data={"orderId": 1})
        message = {"type": "pmessage", "channel": channel_for_room("kitchen"), "data": event.to_json()}
        sessions = []

        async def fake_pool():
            if len(sessions) == 6:
                raise asyncio.CancelledError
            sessions.append(1)
            pool = MagicMock()
            pool.pubsub.return_value = FlakyPubSub(message)
            return pool

        async def no_sleep(delay):
            pass

        delivered = []

        async def on_event(room, evt):
            delivered.append(room)

        monkeypatch.setattr(redis_subscriber, "get_redis_pool", fake_pool)
        monkeypatch.setattr(redis_subscriber.asyncio, "sleep", no_sleep)
        monkeypatch.setattr(redis_subscriber.settings, "redis_max_reconnect_attempts", 2)

        with pytest.raises(asyncio.CancelledError):
            await redis_subscriber.run_subscriber_forever(on_event)
        assert delivered == ["kitchen"] * 6

    async def test_gives_up_after_consecutive_failed_connects(self, monkeypatch):
        calls = []

        async def down_pool():
            calls.append(1)
            raise RedisConnectionError("refused")

        async def no_sleep(delay):
            pass

        monkeypatch.setattr(redis_subscriber, "get_redis_pool", down_pool)
        monkeypatch.setattr(redis_subscriber.asyncio, "sleep", no_sleep)
        monkeypatch.setattr(redis_subscriber.settings, "redis_max_reconnect_attempts", 2)

        with pytest.raises(RedisConnectionError):
            await redis_subscriber.run_subscriber_forever(lambda room, evt: None)
        assert len(calls) == 3


class TestGatewayEndpoint:
    @pytest.fixture
    def ws_client(self):
        return TestClient(gateway_app)

    def test_anonymous_diner_joins_table(self, ws_client):
        with ws_client.websocket_connect("/ws") as ws:
            ws.send_text(json.dumps({"type": "join-table", "tableNumber": 3}))
            assert ws.receive_json() == {"type": "joined", "room": "table:3"}
            ws.send_text(json.dumps({"type": "ping"}))
            assert ws.receive_json() == {"type": "pong"}

    def test_anonymous_cannot_join_kitchen(self, ws_client):
        with ws_client.websocket_connect("/ws") as ws:
            ws.send_text(json.dumps({"type": "join-kitchen"}))
            reply = ws.receive_json()
            assert reply["type"] == "error"
            assert "kitchen" in reply["detail"]

    def test_kitchen_staff_joins_kitchen(self, ws_client):
        token = issue_user_token(21, "k@test.com", "K", Roles.KITCHEN_STAFF)
        with ws_client.websocket_connect(f"/ws?token={token}") as ws:
            ws.send_text(json.dumps({"type": "join-kitchen"}))
            assert ws.receive_json() == {"type": "joined", "room": "kitchen"}
            ws.send_text(json.dumps({"type": "leave", "room": "kitchen"}))
            assert ws.receive_json() == {"type": "left", "room": "kitchen"}

    def test_invalid_token_closes_4001(self, ws_client):
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with ws_client.websocket_connect("/ws?token=garbage") as ws:
                ws.receive_json()
        assert exc_info.value.code == 4001

    def test_health_reports_stats(self, ws_client):
        response = ws_client.get("/ws/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert "total_connections" in body

    def test_health_reports_shutdown(self, ws_client, monkeypatch):
        monkeypatch.setattr(gateway_manager, "is_shutting_down", lambda: True)
        assert ws_client.get("/ws/health").json()["status"] == "shutting_down"
