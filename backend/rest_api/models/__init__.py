"""
SQLAlchemy ORM Models Package.

- base: Base class and AuditMixin
- user: User (customers and staff)
- menu: MenuItem
- table: DiningTable
- order: Order, OrderItem
- feedback: Feedback
"""

from .base import AuditMixin, Base
from .feedback import Feedback
from .menu import MenuItem
from .order import Order, OrderItem
from .table import DiningTable
from .user import User

__all__ = [
    "Base",
    "AuditMixin",
    "User",
    "MenuItem",
    "DiningTable",
    "Order",
    "OrderItem",
    "Feedback",
]
