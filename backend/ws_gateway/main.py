"""
WebSocket Gateway main application.
Fans out order and service-request events to table, kitchen and admin rooms.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI, Query, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rest_api.core.cors import get_cors_origins
from shared.config.constants import RoomMessage
from shared.config.logging import setup_logging, ws_logger as logger
from shared.config.settings import settings
from shared.infrastructure.events import Event, close_redis_pool, get_redis_pool
from shared.security.auth import verify_ws_token
from shared.utils.exceptions import UnauthorizedError
from ws_gateway.connection_manager import ConnectionLimitError, ConnectionManager
from ws_gateway.protocol import (
    JoinDenied,
    ProtocolError,
    parse_client_message,
    room_for_join,
    room_for_leave,
)
from ws_gateway.redis_subscriber import run_subscriber_forever


# Global connection manager
manager = ConnectionManager()


async def dispatch_event(room: str, event: Event) -> None:
    sent = await manager.send_to_room(room, event.to_client_message())
    if sent > 0:
        logger.debug("Dispatched event", event_type=event.type, room=room, clients=sent)


async def start_heartbeat_cleanup() -> None:
    """Close connections that stopped sending heartbeats."""
    while True:
        try:
            await asyncio.sleep(settings.ws_cleanup_interval)
            await manager.cleanup_stale_connections()
        except asyncio.CancelledError:
            break
        except Exception as e:
            logger.error("Error in heartbeat cleanup", error=str(e))


async def start_redis_subscriber() -> None:
    try:
        await run_subscriber_forever(dispatch_event)
    except asyncio.CancelledError:
        pass
    except Exception as e:
        logger.error("Redis subscriber stopped", error=str(e), exc_info=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info("Starting WebSocket Gateway", port=settings.ws_gateway_port, env=settings.environment)

    subscriber_task = asyncio.create_task(start_redis_subscriber())
    cleanup_task = asyncio.create_task(start_heartbeat_cleanup())

    yield

    logger.info("Shutting down WebSocket Gateway")
    for task in (subscriber_task, cleanup_task):
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    await manager.shutdown()
    await close_redis_pool()
    logger.info("Redis connection pool closed")


app = FastAPI(
    title="VibeDine WebSocket Gateway",
    description="Real-time order and service-request notifications",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


# =============================================================================
# Health Check
# =============================================================================


@app.get("/ws/health")
def health_check():
    return {
        "status": "shutting_down" if manager.is_shutting_down() else "healthy",
        "service": "ws-gateway",
        "environment": settings.environment,
        **manager.get_stats(),
    }


@app.get("/ws/health/detailed")
async def detailed_health_check():
    """Connection stats plus a Redis ping; 503 when Redis is unreachable."""
    checks = {
        "service": "ws-gateway",
        "environment": settings.environment,
        "connections": manager.get_stats(),
        "dependencies": {},
    }
    try:
        redis = await get_redis_pool()
        await redis.ping()
        checks["dependencies"]["redis"] = {"status": "healthy"}
        checks["status"] = "healthy"
    except Exception as e:
        checks["dependencies"]["redis"] = {"status": "unhealthy", "error": str(e)}
        checks["status"] = "degraded"
        return JSONResponse(content=checks, status_code=503)
    return checks


# =============================================================================
# WebSocket Endpoint
# =============================================================================


async def handle_message(websocket: WebSocket, ctx: dict | None, raw: str) -> None:
    """Apply one client message to the connection's room membership."""
    try:
        message = parse_client_message(raw)
        msg_type = message["type"]

        if msg_type == RoomMessage.PING:
            await websocket.send_json({"type": "pong"})
        elif msg_type == RoomMessage.LEAVE:
            room = room_for_leave(message)
            await manager.leave(websocket, room)
            await websocket.send_json({"type": "left", "room": room})
        else:
            room = room_for_join(message, ctx["role"] if ctx else None)
            await manager.join(websocket, room)
            await websocket.send_json({"type": "joined", "room": room})
            logger.info("Joined room", room=room, user_id=ctx["user_id"] if ctx else None)
    except (ProtocolError, JoinDenied) as e:
        await websocket.send_json({"type": "error", "detail": str(e)})


@app.websocket("/ws")
async def room_websocket(
    websocket: WebSocket,
    token: str | None = Query(default=None, description="JWT access token; omit for anonymous diners"),
):
    """
    Single endpoint for diners, kitchen and back office.

    Anonymous connections may only join table rooms. Any message counts as
    a heartbeat.
    """
    try:
        ctx = verify_ws_token(token)
    except UnauthorizedError as e:
        await websocket.close(code=4001, reason=str(e.detail))
        return

    user_id = ctx["user_id"] if ctx else None
    try:
        await manager.connect(websocket, user_id)
    except ConnectionLimitError as e:
        logger.warning("Connection rejected", user_id=user_id, reason=str(e))
        return
    except ConnectionError as e:
        logger.warning("Connection refused", reason=str(e))
        await websocket.close(code=1013, reason=str(e))
        return

    logger.info("Client connected", user_id=user_id, role=ctx["role"] if ctx else "anonymous")

    try:
        while True:
            data = await websocket.receive_text()

            if len(data) > settings.ws_max_message_size:
                logger.warning("Message size exceeded limit", user_id=user_id, size=len(data))
                await websocket.close(code=1009, reason="Message too large")
                break

            manager.record_heartbeat(websocket)
            await handle_message(websocket, ctx, data)

    except WebSocketDisconnect:
        logger.info("Client disconnected", user_id=user_id)
    finally:
        await manager.disconnect(websocket)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "ws_gateway.main:app",
        host="0.0.0.0",
        port=settings.ws_gateway_port,
        reload=settings.debug,
    )
