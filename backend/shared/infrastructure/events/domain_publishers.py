"""
Domain event publishers: build the payload for each order event and fan it
out to the rooms listed in EVENT_ROUTES.
"""

from __future__ import annotations

from typing import Any

import redis.asyncio as aioredis

from shared.config.constants import ServiceRequestType
from shared.config.logging import event_logger as logger

from .channels import room_table
from .event_schema import Event
from .event_types import (
    BILL_REQUEST,
    EVENT_ROUTES,
    NEW_ORDER,
    ORDER_PRIORITY_UPDATE,
    ORDER_STATUS_UPDATE,
    ORDER_UPDATED,
    SERVICE_REQUEST,
    WAITER_REQUEST,
)
from .publisher import publish_event


def resolve_rooms(event_type: str, table_number: int) -> list[str]:
    """Concrete rooms for ``event_type`` on an order at ``table_number``."""
    return [
        room_table(table_number) if target == "table" else target
        for target in EVENT_ROUTES[event_type]
    ]


async def publish_to_rooms(
    redis_client: aioredis.Redis,
    event_type: str,
    table_number: int,
    data: dict[str, Any],
) -> int:
    """Publish one event per routed room. Returns total receivers."""
    receivers = 0
    for room in resolve_rooms(event_type, table_number):
        receivers += await publish_event(redis_client, Event(type=event_type, room=room, data=data))
    logger.debug("Event fanned out", event_type=event_type, table_number=table_number, receivers=receivers)
    return receivers


async def publish_new_order(redis_client: aioredis.Redis, order: dict[str, Any]) -> None:
    await publish_to_rooms(
        redis_client,
        NEW_ORDER,
        order["table_number"],
        {
            "orderId": order["id"],
            "orderNumber": order["order_number"],
            "tableNumber": order["table_number"],
            "priority": order["priority"],
            "version": order["version"],
        },
    )


async def publish_order_status(redis_client: aioredis.Redis, order: dict[str, Any]) -> None:
    """A status change: full summary to staff rooms, status to the table room."""
    await publish_to_rooms(
        redis_client,
        ORDER_UPDATED,
        order["table_number"],
        {
            "orderId": order["id"],
            "orderNumber": order["order_number"],
            "tableNumber": order["table_number"],
            "status": order["status"],
            "priority": order["priority"],
            "version": order["version"],
        },
    )
    await publish_to_rooms(
        redis_client,
        ORDER_STATUS_UPDATE,
        order["table_number"],
        {"orderId": order["id"], "status": order["status"], "version": order["version"]},
    )


async def publish_order_priority(redis_client: aioredis.Redis, order: dict[str, Any]) -> None:
    await publish_to_rooms(
        redis_client,
        ORDER_PRIORITY_UPDATE,
        order["table_number"],
        {"orderId": order["id"], "priority": order["priority"], "version": order["version"]},
    )


async def publish_waiter_request(
    redis_client: aioredis.Redis,
    order: dict[str, Any],
    request_type: str,
    message: str | None = None,
) -> None:
    await publish_to_rooms(
        redis_client,
        WAITER_REQUEST,
        order["table_number"],
        {
            "orderId": order["id"],
            "tableNumber": order["table_number"],
            "type": request_type,
            "message": message,
        },
    )
    await publish_to_rooms(
        redis_client,
        SERVICE_REQUEST,
        order["table_number"],
        {"orderId": order["id"], "tableNumber": order["table_number"], "type": request_type},
    )


async def publish_bill_request(redis_client: aioredis.Redis, order: dict[str, Any]) -> None:
    await publish_to_rooms(
        redis_client,
        BILL_REQUEST,
        order["table_number"],
        {"orderId": order["id"], "tableNumber": order["table_number"]},
    )
    await publish_to_rooms(
        redis_client,
        SERVICE_REQUEST,
        order["table_number"],
        {"orderId": order["id"], "tableNumber": order["table_number"], "type": ServiceRequestType.BILL},
    )
