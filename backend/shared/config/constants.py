"""
Centralized constants: roles, statuses, limits and real-time event names.

Usage:
    from shared.config.constants import OrderStatus, ORDER_TRANSITIONS, Roles

    if status in OrderStatus.TERMINAL:
        ...
"""

from typing import Final


# =============================================================================
# User Roles
# =============================================================================


class Roles:
    """User role constants."""

    CUSTOMER: Final[str] = "customer"
    KITCHEN_STAFF: Final[str] = "kitchen_staff"
    MANAGER: Final[str] = "manager"
    ADMIN: Final[str] = "admin"

    ALL: Final[list[str]] = [CUSTOMER, KITCHEN_STAFF, MANAGER, ADMIN]


STAFF_ROLES: Final[frozenset[str]] = frozenset({Roles.ADMIN, Roles.MANAGER, Roles.KITCHEN_STAFF})


# =============================================================================
# Order lifecycle
# =============================================================================


class OrderStatus:
    """Order status constants, in pipeline order."""

    RECEIVED: Final[str] = "received"
    PREPARING: Final[str] = "preparing"
    QUALITY_CHECK: Final[str] = "quality_check"
    READY: Final[str] = "ready"
    DELIVERED: Final[str] = "delivered"
    CANCELLED: Final[str] = "cancelled"

    PIPELINE: Final[list[str]] = [RECEIVED, PREPARING, QUALITY_CHECK, READY, DELIVERED]
    ACTIVE: Final[list[str]] = [RECEIVED, PREPARING, QUALITY_CHECK, READY]
    TERMINAL: Final[frozenset[str]] = frozenset({DELIVERED, CANCELLED})
    ALL: Final[list[str]] = [RECEIVED, PREPARING, QUALITY_CHECK, READY, DELIVERED, CANCELLED]


# Exactly one forward step; cancelled is reachable from every non-terminal state.
ORDER_TRANSITIONS: Final[dict[str, list[str]]] = {
    OrderStatus.RECEIVED: [OrderStatus.PREPARING, OrderStatus.CANCELLED],
    OrderStatus.PREPARING: [OrderStatus.QUALITY_CHECK, OrderStatus.CANCELLED],
    OrderStatus.QUALITY_CHECK: [OrderStatus.READY, OrderStatus.CANCELLED],
    OrderStatus.READY: [OrderStatus.DELIVERED, OrderStatus.CANCELLED],
    OrderStatus.DELIVERED: [],
    OrderStatus.CANCELLED: [],
}

# Column stamped on the order when it enters a status
ORDER_STATUS_TIMESTAMPS: Final[dict[str, str]] = {
    OrderStatus.PREPARING: "preparing_at",
    OrderStatus.READY: "ready_at",
    OrderStatus.DELIVERED: "delivered_at",
    OrderStatus.CANCELLED: "cancelled_at",
}


class Priority:
    """Kitchen display urgency."""

    NORMAL: Final[int] = 1
    HIGH: Final[int] = 2
    URGENT: Final[int] = 3

    ALL: Final[tuple[int, ...]] = (NORMAL, HIGH, URGENT)


class TableStatus:
    AVAILABLE: Final[str] = "available"
    OCCUPIED: Final[str] = "occupied"


# =============================================================================
# Menu and cart
# =============================================================================


class MenuCategory:
    APPETIZERS: Final[str] = "Appetizers"
    MAIN_COURSE: Final[str] = "Main Course"
    DESSERTS: Final[str] = "Desserts"
    DRINKS: Final[str] = "Drinks"

    ALL: Final[list[str]] = [APPETIZERS, MAIN_COURSE, DESSERTS, DRINKS]


class Portion:
    STANDARD: Final[str] = "Standard"
    LARGE: Final[str] = "Large"

    ALL: Final[list[str]] = [STANDARD, LARGE]


NUTRITION_FIELDS: Final[tuple[str, ...]] = ("calories", "protein", "carbs", "fat", "sodium", "fiber")


class ServiceRequestType:
    WAITER: Final[str] = "waiter"
    WATER: Final[str] = "water"
    HELP: Final[str] = "help"
    BILL: Final[str] = "bill"


class AnalyticsPeriod:
    TODAY: Final[str] = "today"
    WEEK: Final[str] = "week"
    MONTH: Final[str] = "month"
    YEAR: Final[str] = "year"

    DAYS: Final[dict[str, int]] = {TODAY: 1, WEEK: 7, MONTH: 30, YEAR: 365}


# =============================================================================
# Validation Constants
# =============================================================================


class Limits:
    """Validation limits."""

    MIN_QUANTITY: Final[int] = 1
    MAX_QUANTITY: Final[int] = 99

    MIN_TABLE_NUMBER: Final[int] = 1
    MAX_TABLE_NUMBER: Final[int] = 50

    MIN_RATING: Final[int] = 1
    MAX_RATING: Final[int] = 5

    MAX_NAME_LENGTH: Final[int] = 200
    MAX_DESCRIPTION_LENGTH: Final[int] = 2000
    MAX_NOTE_LENGTH: Final[int] = 500

    DEFAULT_PAGE_SIZE: Final[int] = 50
    MAX_PAGE_SIZE: Final[int] = 200
    MAX_RECOMMENDATIONS: Final[int] = 10
    TOP_ITEMS: Final[int] = 10


# =============================================================================
# Real-time events and rooms
# =============================================================================


class EventType:
    """Event names pushed to WebSocket clients."""

    NEW_ORDER: Final[str] = "new-order"
    ORDER_UPDATED: Final[str] = "order-updated"
    ORDER_STATUS_UPDATE: Final[str] = "order-status-update"
    ORDER_PRIORITY_UPDATE: Final[str] = "order-priority-update"
    WAITER_REQUEST: Final[str] = "waiter-request"
    BILL_REQUEST: Final[str] = "bill-request"
    SERVICE_REQUEST: Final[str] = "service-request"

    ALL: Final[frozenset[str]] = frozenset({
        NEW_ORDER, ORDER_UPDATED, ORDER_STATUS_UPDATE, ORDER_PRIORITY_UPDATE,
        WAITER_REQUEST, BILL_REQUEST, SERVICE_REQUEST,
    })


class RoomMessage:
    """Client-to-gateway message types."""

    JOIN_TABLE: Final[str] = "join-table"
    JOIN_KITCHEN: Final[str] = "join-kitchen"
    JOIN_ADMIN: Final[str] = "join-admin"
    LEAVE: Final[str] = "leave"
    PING: Final[str] = "ping"


# =============================================================================
# Status helpers
# =============================================================================


def validate_order_transition(current_status: str, new_status: str) -> bool:
    """True if ``new_status`` is a legal next state for ``current_status``."""
    return new_status in ORDER_TRANSITIONS.get(current_status, [])


def next_order_status(current_status: str) -> str | None:
    """The forward step from ``current_status``, or None for terminal states."""
    for candidate in ORDER_TRANSITIONS.get(current_status, []):
        if candidate != OrderStatus.CANCELLED:
            return candidate
    return None


def is_terminal_status(status: str) -> bool:
    return status in OrderStatus.TERMINAL
