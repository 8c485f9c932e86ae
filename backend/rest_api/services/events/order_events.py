"""
Background publishing of order events.

Routers schedule these with FastAPI ``BackgroundTasks`` after the command has
committed, so a Redis outage never fails or delays the HTTP response:

    background_tasks.add_task(publish_status_changed, OrderService.to_event_payload(order))

Failures are logged and dropped; delivery to WebSocket clients is
at-most-once.
"""

from typing import Any, Awaitable, Callable

from shared.config.logging import event_logger as logger
from shared.infrastructure.events import (
    get_redis_client,
    publish_bill_request,
    publish_new_order,
    publish_order_priority,
    publish_order_status,
    publish_waiter_request,
)


async def _publish(
    name: str,
    order: dict[str, Any],
    publisher: Callable[..., Awaitable[None]],
    *args: Any,
) -> None:
    try:
        # Pooled client; the pool owns the connection lifecycle
        redis_client = await get_redis_client()
        await publisher(redis_client, order, *args)
        logger.info("Order event published", event=name, order_id=order["id"], version=order.get("version"))
    except Exception as e:
        logger.error(
            "Failed to publish order event",
            event=name,
            order_id=order.get("id"),
            error=str(e),
            error_type=type(e).__name__,
        )


async def publish_order_created(order: dict[str, Any]) -> None:
    await _publish("new-order", order, publish_new_order)


async def publish_status_changed(order: dict[str, Any]) -> None:
    await _publish("order-updated", order, publish_order_status)


async def publish_priority_changed(order: dict[str, Any]) -> None:
    await _publish("order-priority-update", order, publish_order_priority)


async def publish_waiter_called(order: dict[str, Any], request_type: str, message: str | None = None) -> None:
    await _publish("waiter-request", order, publish_waiter_request, request_type, message)


async def publish_bill_requested(order: dict[str, Any]) -> None:
    await _publish("bill-request", order, publish_bill_request)
