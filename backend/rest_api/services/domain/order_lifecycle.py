"""
Order lifecycle rules that do not touch the database.

- Which transitions a role may request from a given status.
- Kitchen queue ordering: grouped by status in pipeline order, priority
  descending inside each group, oldest first among equal priorities.
- Version comparison for discarding stale payloads.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Protocol, Sequence, TypeVar

from shared.config.constants import ORDER_TRANSITIONS, OrderStatus
from shared.security.permissions import Permission, has_capability

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class QueueEntry(Protocol):
    id: int
    status: str
    priority: int
    created_at: datetime | None


T = TypeVar("T", bound=QueueEntry)


def required_permission(target_status: str) -> Permission:
    """Capability needed to move an order into ``target_status``."""
    if target_status == OrderStatus.CANCELLED:
        return Permission.CANCEL_ORDER
    return Permission.ADVANCE_ORDER_STATUS


def get_allowed_order_transitions(current_status: str, role: str | None) -> list[str]:
    """Targets reachable from ``current_status`` that ``role`` may request."""
    return [
        target
        for target in ORDER_TRANSITIONS.get(current_status, [])
        if has_capability(role, required_permission(target))
    ]


def is_valid_status_history(statuses: Sequence[str]) -> bool:
    """
    True if ``statuses`` is a path through the transition table starting at
    ``received``: a prefix of the pipeline, optionally ending in cancelled.
    """
    if not statuses:
        return True
    if statuses[0] != OrderStatus.RECEIVED:
        return False
    return all(
        nxt in ORDER_TRANSITIONS.get(cur, [])
        for cur, nxt in zip(statuses, statuses[1:])
    )


def _arrival_key(order: QueueEntry) -> tuple[datetime, int]:
    created = order.created_at or _EPOCH
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return created, order.id


def sort_by_priority(orders: Iterable[T]) -> list[T]:
    """Stable sort, priority descending. Equal priorities keep input order."""
    return sorted(orders, key=lambda o: -o.priority)


def build_kitchen_queue(orders: Iterable[T]) -> dict[str, list[T]]:
    """
    Active orders grouped by status in pipeline order. Each group is sorted
    by priority descending, then by arrival (created_at, id) ascending.
    Terminal orders are dropped.
    """
    queue: dict[str, list[T]] = {status: [] for status in OrderStatus.ACTIVE}
    for order in sorted(orders, key=_arrival_key):
        if order.status in queue:
            queue[order.status].append(order)
    return {status: sort_by_priority(group) for status, group in queue.items()}


def is_stale(current_version: int | None, incoming_version: int) -> bool:
    """True if a payload at ``incoming_version`` is older than what the client holds."""
    return current_version is not None and incoming_version < current_version
