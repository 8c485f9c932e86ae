"""
WebSocket connection manager.

Tracks live connections, the rooms each one has joined (``table:{n}``,
``kitchen``, ``admin``) and the last heartbeat seen from each. Registries are
guarded by an asyncio.Lock; room broadcasts send concurrently and drop the
sockets that fail.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from shared.config.logging import ws_logger as logger
from shared.config.settings import settings


def _is_ws_connected(ws: WebSocket) -> bool:
    """True if the socket can still be written to."""
    return (
        ws.client_state == WebSocketState.CONNECTED
        and ws.application_state == WebSocketState.CONNECTED
    )


class ConnectionLimitError(ConnectionError):
    """The user already holds the maximum number of connections."""


class ConnectionManager:
    """
    Connections indexed by room and by user.

    Anonymous diners (no token) are tracked by socket only and may hold any
    number of connections; authenticated users are capped.
    """

    def __init__(
        self,
        max_connections_per_user: int | None = None,
        heartbeat_timeout: float | None = None,
    ):
        self.max_connections_per_user = max_connections_per_user or settings.ws_max_connections_per_user
        self.heartbeat_timeout = heartbeat_timeout or settings.ws_heartbeat_timeout
        self._shutdown = False
        self.by_room: dict[str, set[WebSocket]] = {}
        self.by_user: dict[int, set[WebSocket]] = {}
        self._ws_rooms: dict[WebSocket, set[str]] = {}
        self._ws_user: dict[WebSocket, int | None] = {}
        self._last_heartbeat: dict[WebSocket, float] = {}
        self._lock = asyncio.Lock()

    # =========================================================================
    # Registration
    # =========================================================================

    async def connect(self, websocket: WebSocket, user_id: int | None = None, timeout: float = 5.0) -> None:
        """
        Accept and register a socket.

        Raises:
            ConnectionError: shutting down or the handshake timed out
            ConnectionLimitError: per-user cap reached (socket closed with 1008)
        """
        if self._shutdown:
            raise ConnectionError("Server is shutting down")

        try:
            await asyncio.wait_for(websocket.accept(), timeout=timeout)
        except asyncio.TimeoutError:
            raise ConnectionError("WebSocket accept timed out")

        async with self._lock:
            if user_id is not None and len(self.by_user.get(user_id, ())) >= self.max_connections_per_user:
                over_limit = True
            else:
                over_limit = False
                self._ws_user[websocket] = user_id
                self._ws_rooms[websocket] = set()
                self._last_heartbeat[websocket] = time.monotonic()
                if user_id is not None:
                    self.by_user.setdefault(user_id, set()).add(websocket)

        if over_limit:
            await websocket.close(code=1008, reason="Too many connections")
            raise ConnectionLimitError(
                f"User {user_id} exceeded max connections ({self.max_connections_per_user})"
            )

    async def disconnect(self, websocket: WebSocket) -> None:
        """Remove a socket from every index. Safe to call twice."""
        async with self._lock:
            self._last_heartbeat.pop(websocket, None)

            user_id = self._ws_user.pop(websocket, None)
            if user_id is not None and user_id in self.by_user:
                self.by_user[user_id].discard(websocket)
                if not self.by_user[user_id]:
                    del self.by_user[user_id]

            for room in self._ws_rooms.pop(websocket, set()):
                members = self.by_room.get(room)
                if members is not None:
                    members.discard(websocket)
                    if not members:
                        del self.by_room[room]

    async def join(self, websocket: WebSocket, room: str) -> None:
        async with self._lock:
            if websocket not in self._ws_rooms:
                return
            self.by_room.setdefault(room, set()).add(websocket)
            self._ws_rooms[websocket].add(room)

    async def leave(self, websocket: WebSocket, room: str) -> None:
        async with self._lock:
            members = self.by_room.get(room)
            if members is not None:
                members.discard(websocket)
                if not members:
                    del self.by_room[room]
            if websocket in self._ws_rooms:
                self._ws_rooms[websocket].discard(room)

    def rooms_of(self, websocket: WebSocket) -> set[str]:
        return set(self._ws_rooms.get(websocket, ()))

    # =========================================================================
    # Delivery
    # =========================================================================

    async def send_to_room(self, room: str, payload: dict[str, Any]) -> int:
        """
        Send ``payload`` to every socket in ``room`` concurrently.
        Returns the number of successful sends; failed sockets are disconnected.
        """
        connections = [ws for ws in list(self.by_room.get(room, ())) if _is_ws_connected(ws)]
        if not connections:
            return 0

        results = await asyncio.gather(
            *(ws.send_json(payload) for ws in connections),
            return_exceptions=True,
        )
        sent = 0
        for ws, result in zip(connections, results):
            if isinstance(result, BaseException):
                logger.warning("Send failed, dropping connection", room=room, error=str(result))
                await self.disconnect(ws)
            else:
                sent += 1
        return sent

    # =========================================================================
    # Heartbeats
    # =========================================================================

    def record_heartbeat(self, websocket: WebSocket) -> None:
        if websocket in self._last_heartbeat:
            self._last_heartbeat[websocket] = time.monotonic()

    def get_stale_connections(self) -> list[WebSocket]:
        now = time.monotonic()
        return [
            ws for ws, last in list(self._last_heartbeat.items())
            if now - last > self.heartbeat_timeout
        ]

    async def cleanup_stale_connections(self) -> int:
        stale = self.get_stale_connections()
        for ws in stale:
            try:
                await ws.close(code=1001, reason="Heartbeat timeout")
            except (RuntimeError, OSError) as e:
                logger.warning("Failed to close stale connection", error=str(e))
            await self.disconnect(ws)
        if stale:
            logger.info("Stale connections cleaned up", count=len(stale))
        return len(stale)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def shutdown(self) -> int:
        """Close every connection and refuse new ones."""
        self._shutdown = True
        async with self._lock:
            connections = list(self._ws_user)

        closed = 0
        for ws in connections:
            try:
                await ws.close(code=1001, reason="Server shutdown")
                closed += 1
            except (RuntimeError, OSError) as e:
                logger.warning("Failed to close connection during shutdown", error=str(e))
            await self.disconnect(ws)

        logger.info("WebSocket shutdown complete", closed=closed)
        return closed

    def is_shutting_down(self) -> bool:
        return self._shutdown

    @property
    def total_connections(self) -> int:
        return len(self._ws_user)

    def get_stats(self) -> dict[str, Any]:
        return {
            "total_connections": self.total_connections,
            "users_connected": len(self.by_user),
            "rooms": {room: len(members) for room, members in self.by_room.items()},
        }
