"""
Event names and their room routing.
"""

from __future__ import annotations

from typing import Final

from shared.config.constants import EventType

NEW_ORDER: Final[str] = EventType.NEW_ORDER
ORDER_UPDATED: Final[str] = EventType.ORDER_UPDATED
ORDER_STATUS_UPDATE: Final[str] = EventType.ORDER_STATUS_UPDATE
ORDER_PRIORITY_UPDATE: Final[str] = EventType.ORDER_PRIORITY_UPDATE
WAITER_REQUEST: Final[str] = EventType.WAITER_REQUEST
BILL_REQUEST: Final[str] = EventType.BILL_REQUEST
SERVICE_REQUEST: Final[str] = EventType.SERVICE_REQUEST

# Serialized envelope limit
MAX_EVENT_SIZE: Final[int] = 64 * 1024

# Which rooms each event reaches. "table" means the order's table room.
EVENT_ROUTES: Final[dict[str, tuple[str, ...]]] = {
    NEW_ORDER: ("kitchen", "admin"),
    ORDER_UPDATED: ("kitchen", "admin"),
    ORDER_STATUS_UPDATE: ("table",),
    ORDER_PRIORITY_UPDATE: ("kitchen", "admin"),
    WAITER_REQUEST: ("kitchen", "admin"),
    BILL_REQUEST: ("kitchen", "admin"),
    SERVICE_REQUEST: ("admin",),
}
