"""
Orders router.

Diners place and track orders; kitchen staff work the queue. Every mutation
returns the order with its new ``version`` and schedules real-time events
once the change is committed.
"""

from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request, status
from sqlalchemy.orm import Session

from shared.config.constants import Limits, ServiceRequestType
from shared.infrastructure.db import get_db
from shared.security.auth import current_user_context, optional_user_context
from shared.security.permissions import Permission, has_capability, require_permission
from shared.security.rate_limit import ORDER_RATE, SERVICE_REQUEST_RATE, limiter
from shared.utils.schemas import (
    AdvanceRequest,
    KitchenQueueResponse,
    MessageResponse,
    OrderCreate,
    OrderListResponse,
    OrderResponse,
    OrderStatusLiteral,
    PriorityUpdate,
    StatusUpdate,
    WaiterRequestInput,
)
from rest_api.services.domain import OrderService
from rest_api.services.domain.order_lifecycle import required_permission
from rest_api.services.events import (
    publish_bill_requested,
    publish_order_created,
    publish_priority_changed,
    publish_status_changed,
    publish_waiter_called,
)


router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(ORDER_RATE)
def create_order(
    request: Request,
    body: OrderCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    ctx: dict[str, Any] | None = Depends(optional_user_context),
) -> OrderResponse:
    """Place an order directly. Logged-in customers get allergy alerts."""
    order = OrderService(db).create_order(body, ctx)
    background_tasks.add_task(publish_order_created, OrderService.to_event_payload(order))
    return OrderResponse(order=order)


@router.get("", response_model=OrderListResponse)
def list_orders(
    status_filter: OrderStatusLiteral | None = Query(default=None, alias="status"),
    table_number: int | None = Query(default=None, alias="tableNumber", ge=1, le=50),
    limit: int = Query(default=Limits.DEFAULT_PAGE_SIZE, ge=1, le=Limits.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(current_user_context),
) -> OrderListResponse:
    """Staff see every order; customers only their own."""
    customer_id = None
    if not has_capability(ctx["role"], Permission.VIEW_ALL_ORDERS):
        require_permission(ctx, Permission.VIEW_OWN_ORDERS)
        customer_id = ctx["user_id"]
    orders = OrderService(db).list_orders(
        status=status_filter,
        table_number=table_number,
        customer_id=customer_id,
        limit=limit,
    )
    return OrderListResponse(orders=orders)


@router.get("/active", response_model=OrderListResponse)
def list_active_orders(
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(current_user_context),
) -> OrderListResponse:
    require_permission(ctx, Permission.VIEW_KITCHEN_QUEUE)
    return OrderListResponse(orders=OrderService(db).list_active())


@router.get("/kitchen-queue", response_model=KitchenQueueResponse)
def kitchen_queue(
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(current_user_context),
) -> KitchenQueueResponse:
    """
    Active orders grouped by status. Within a group: highest priority first,
    oldest first among equal priorities.
    """
    require_permission(ctx, Permission.VIEW_KITCHEN_QUEUE)
    return KitchenQueueResponse(queue=OrderService(db).kitchen_queue())


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(order_id: int, db: Session = Depends(get_db)) -> OrderResponse:
    """Public: the order id is the diner's tracking handle."""
    return OrderResponse(order=OrderService(db).get_order(order_id))


@router.patch("/{order_id}/status", response_model=OrderResponse)
def update_order_status(
    order_id: int,
    body: StatusUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(current_user_context),
) -> OrderResponse:
    """
    Move an order to ``status``. Advancing needs ADVANCE_ORDER_STATUS and
    cancelling needs CANCEL_ORDER. 409 on an illegal transition or a stale
    ``expectedVersion``.
    """
    require_permission(ctx, required_permission(body.status))
    order = OrderService(db).update_status(order_id, body.status, ctx, body.expected_version)
    background_tasks.add_task(publish_status_changed, OrderService.to_event_payload(order))
    return OrderResponse(order=order)


@router.post("/{order_id}/advance", response_model=OrderResponse)
def advance_order(
    order_id: int,
    background_tasks: BackgroundTasks,
    body: AdvanceRequest | None = None,
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(current_user_context),
) -> OrderResponse:
    """Move an order one step forward along the pipeline."""
    require_permission(ctx, Permission.ADVANCE_ORDER_STATUS)
    expected = body.expected_version if body else None
    order = OrderService(db).advance(order_id, ctx, expected)
    background_tasks.add_task(publish_status_changed, OrderService.to_event_payload(order))
    return OrderResponse(order=order)


@router.patch("/{order_id}/priority", response_model=OrderResponse)
def update_order_priority(
    order_id: int,
    body: PriorityUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(current_user_context),
) -> OrderResponse:
    require_permission(ctx, Permission.SET_ORDER_PRIORITY)
    order = OrderService(db).update_priority(order_id, body.priority, ctx, body.expected_version)
    background_tasks.add_task(publish_priority_changed, OrderService.to_event_payload(order))
    return OrderResponse(order=order)


@router.post("/{order_id}/request-waiter", response_model=MessageResponse)
@limiter.limit(SERVICE_REQUEST_RATE)
def request_waiter(
    request: Request,
    order_id: int,
    background_tasks: BackgroundTasks,
    body: WaiterRequestInput | None = None,
    db: Session = Depends(get_db),
) -> MessageResponse:
    body = body or WaiterRequestInput()
    order = OrderService(db).get_for_service_request(order_id, body.type)
    background_tasks.add_task(
        publish_waiter_called,
        OrderService.to_event_payload(order),
        body.type,
        body.message,
    )
    return MessageResponse(message="A waiter has been notified")


@router.post("/{order_id}/request-bill", response_model=MessageResponse)
@limiter.limit(SERVICE_REQUEST_RATE)
def request_bill(
    request: Request,
    order_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
) -> MessageResponse:
    order = OrderService(db).get_for_service_request(order_id, ServiceRequestType.BILL)
    background_tasks.add_task(publish_bill_requested, OrderService.to_event_payload(order))
    return MessageResponse(message="Your bill is on its way")
