"""
Domain Services - Application Layer.

Structure:
    Router (thin controller)
        ↓
    Service (business logic)  ← YOU ARE HERE
        ↓
    Model (entity)

Usage:
    from rest_api.services.domain import MenuService

    # In router
    service = MenuService(db)
    items = service.list_items(available=True)
"""

from .auth_service import AuthService
from .cart_service import CartService
from .feedback_service import FeedbackService
from .menu_service import MenuService
from .order_service import OrderService
from .recommendation_service import RecommendationService
from .reporting_service import ReportingService
from .staff_service import StaffService
from .table_service import TableService

__all__ = [
    "AuthService",
    "CartService",
    "FeedbackService",
    "MenuService",
    "OrderService",
    "RecommendationService",
    "ReportingService",
    "StaffService",
    "TableService",
]
