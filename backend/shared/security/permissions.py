"""
Capability-based authorization.

Routers and the WebSocket gateway never compare role strings directly; they
ask whether the caller's role grants a ``Permission``:

    require_permission(ctx, Permission.SET_ORDER_PRIORITY)

    if has_capability(role, Permission.JOIN_KITCHEN_ROOM):
        ...
"""

from enum import Enum
from typing import Any, Final

from shared.config.constants import Roles
from shared.utils.exceptions import ForbiddenError, UnauthorizedError


class Permission(str, Enum):
    """Closed set of capabilities a role can hold."""

    # Customer-facing
    PLACE_ORDER = "place_order"
    VIEW_OWN_ORDERS = "view_own_orders"
    REQUEST_SERVICE = "request_service"
    SUBMIT_FEEDBACK = "submit_feedback"
    MANAGE_HEALTH_PROFILE = "manage_health_profile"

    # Kitchen
    VIEW_KITCHEN_QUEUE = "view_kitchen_queue"
    ADVANCE_ORDER_STATUS = "advance_order_status"
    SET_ORDER_PRIORITY = "set_order_priority"
    CANCEL_ORDER = "cancel_order"
    VIEW_ALL_ORDERS = "view_all_orders"

    # Back office
    MANAGE_MENU = "manage_menu"
    VIEW_FEEDBACK = "view_feedback"
    VIEW_ANALYTICS = "view_analytics"
    MANAGE_STAFF = "manage_staff"

    # Real-time rooms
    JOIN_KITCHEN_ROOM = "join_kitchen_room"
    JOIN_ADMIN_ROOM = "join_admin_room"


_CUSTOMER: Final[frozenset[Permission]] = frozenset({
    Permission.PLACE_ORDER,
    Permission.VIEW_OWN_ORDERS,
    Permission.REQUEST_SERVICE,
    Permission.SUBMIT_FEEDBACK,
    Permission.MANAGE_HEALTH_PROFILE,
})

_KITCHEN: Final[frozenset[Permission]] = frozenset({
    Permission.VIEW_KITCHEN_QUEUE,
    Permission.ADVANCE_ORDER_STATUS,
    Permission.SET_ORDER_PRIORITY,
    Permission.CANCEL_ORDER,
    Permission.VIEW_ALL_ORDERS,
    Permission.JOIN_KITCHEN_ROOM,
})

_MANAGER: Final[frozenset[Permission]] = frozenset(Permission) - {Permission.MANAGE_STAFF}

ROLE_PERMISSIONS: Final[dict[str, frozenset[Permission]]] = {
    Roles.CUSTOMER: _CUSTOMER,
    Roles.KITCHEN_STAFF: _KITCHEN,
    Roles.MANAGER: _MANAGER,
    Roles.ADMIN: frozenset(Permission),
}


def permissions_for(role: str | None) -> frozenset[Permission]:
    """All capabilities granted to ``role``; unknown roles get none."""
    if role is None:
        return frozenset()
    return ROLE_PERMISSIONS.get(role, frozenset())


def has_capability(role: str | None, permission: Permission) -> bool:
    return permission in permissions_for(role)


def require_permission(ctx: dict[str, Any] | None, permission: Permission) -> None:
    """
    Raise unless the caller holds ``permission``.

    Raises:
        UnauthorizedError: no caller context.
        ForbiddenError: the caller's role lacks the capability.
    """
    if ctx is None:
        raise UnauthorizedError()
    if not has_capability(ctx.get("role"), permission):
        raise ForbiddenError(
            permission.value.replace("_", " "),
            user_id=ctx.get("user_id"),
            role=ctx.get("role"),
        )
