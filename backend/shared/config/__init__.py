"""
Configuration module: settings, logging, constants.
"""

from shared.config.constants import (
    ORDER_TRANSITIONS,
    Limits,
    OrderStatus,
    Priority,
    Roles,
    STAFF_ROLES,
)
from shared.config.logging import get_logger, setup_logging
from shared.config.settings import DATABASE_URL, settings

__all__ = [
    # settings
    "settings",
    "DATABASE_URL",
    # logging
    "get_logger",
    "setup_logging",
    # constants
    "Roles",
    "STAFF_ROLES",
    "OrderStatus",
    "ORDER_TRANSITIONS",
    "Priority",
    "Limits",
]
