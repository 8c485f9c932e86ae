"""
Real-time events over Redis pub/sub.

- channels.py: rooms (table:{n}, kitchen, admin) and their channels
- event_types.py: event names and room routing
- event_schema.py: Event envelope
- circuit_breaker.py: breaker and retry backoff
- redis_pool.py: async and sync connection pools
- publisher.py: publish_event with retry
- domain_publishers.py: order and service-request publishers
"""

from .channels import (
    CHANNEL_PATTERN,
    ROOM_ADMIN,
    ROOM_KITCHEN,
    channel_for_room,
    is_valid_room,
    room_from_channel,
    room_table,
)
from .circuit_breaker import (
    CircuitState,
    EventCircuitBreaker,
    calculate_retry_delay_with_jitter,
    get_event_circuit_breaker,
)
from .domain_publishers import (
    publish_bill_request,
    publish_new_order,
    publish_order_priority,
    publish_order_status,
    publish_to_rooms,
    publish_waiter_request,
    resolve_rooms,
)
from .event_schema import Event
from .event_types import (
    BILL_REQUEST,
    EVENT_ROUTES,
    MAX_EVENT_SIZE,
    NEW_ORDER,
    ORDER_PRIORITY_UPDATE,
    ORDER_STATUS_UPDATE,
    ORDER_UPDATED,
    SERVICE_REQUEST,
    WAITER_REQUEST,
)
from .publisher import publish_event
from .redis_pool import (
    close_redis_pool,
    get_redis_client,
    get_redis_pool,
    get_redis_sync_client,
    ping_redis,
)

__all__ = [
    # channels
    "CHANNEL_PATTERN",
    "ROOM_ADMIN",
    "ROOM_KITCHEN",
    "channel_for_room",
    "is_valid_room",
    "room_from_channel",
    "room_table",
    # circuit breaker
    "CircuitState",
    "EventCircuitBreaker",
    "calculate_retry_delay_with_jitter",
    "get_event_circuit_breaker",
    # schema and types
    "Event",
    "EVENT_ROUTES",
    "MAX_EVENT_SIZE",
    "NEW_ORDER",
    "ORDER_UPDATED",
    "ORDER_STATUS_UPDATE",
    "ORDER_PRIORITY_UPDATE",
    "WAITER_REQUEST",
    "BILL_REQUEST",
    "SERVICE_REQUEST",
    # publishing
    "publish_event",
    "publish_to_rooms",
    "resolve_rooms",
    "publish_new_order",
    "publish_order_status",
    "publish_order_priority",
    "publish_waiter_request",
    "publish_bill_request",
    # pools
    "get_redis_pool",
    "get_redis_client",
    "get_redis_sync_client",
    "ping_redis",
    "close_redis_pool",
]
