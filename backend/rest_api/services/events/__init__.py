"""
Event Services - Real-time event publishing for order tracking.

Provides background-task entry points that publish order and service-request
events through Redis once a command has committed.
"""

from .order_events import (
    publish_bill_requested,
    publish_order_created,
    publish_priority_changed,
    publish_status_changed,
    publish_waiter_called,
)

__all__ = [
    "publish_order_created",
    "publish_status_changed",
    "publish_priority_changed",
    "publish_waiter_called",
    "publish_bill_requested",
]
