"""
Services module for business logic.

- domain/: Application services (business logic), one class per aggregate
- events/: Background publishing of real-time events after a commit

Usage:
    from rest_api.services.domain import OrderService
    service = OrderService(db)
    order = service.advance(order_id, actor=ctx)
"""
