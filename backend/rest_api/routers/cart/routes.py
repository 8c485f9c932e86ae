"""
Cart router.
The cart belongs to the client session named by the X-Session-ID header;
no login is needed to build one.
"""

from typing import Annotated, Any

from fastapi import APIRouter, BackgroundTasks, Depends, Header, Request, Response, status
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.infrastructure.session_store import ClientSessionStore, get_session_store
from shared.security.auth import optional_user_context
from shared.security.rate_limit import ORDER_RATE, limiter
from shared.utils.schemas import (
    CartItemAdd,
    CartQuantityUpdate,
    CartResponse,
    CartTableUpdate,
    CheckoutRequest,
    OrderResponse,
)
from rest_api.services.domain import CartService, OrderService
from rest_api.services.events import publish_order_created


router = APIRouter(prefix="/api/cart", tags=["cart"])


def get_cart_service(
    db: Session = Depends(get_db),
    store: ClientSessionStore = Depends(get_session_store),
) -> CartService:
    return CartService(db, store)


SessionId = Annotated[str, Header(alias="X-Session-ID")]


@router.get("", response_model=CartResponse)
def get_cart(
    session_id: SessionId,
    cart: CartService = Depends(get_cart_service),
) -> CartResponse:
    return CartResponse(cart=cart.get_cart(session_id))


@router.put("/table", response_model=CartResponse)
def set_table(
    body: CartTableUpdate,
    session_id: SessionId,
    cart: CartService = Depends(get_cart_service),
) -> CartResponse:
    return CartResponse(cart=cart.set_table(session_id, body.table_number))


@router.post("/items", response_model=CartResponse)
def add_item(
    body: CartItemAdd,
    session_id: SessionId,
    cart: CartService = Depends(get_cart_service),
) -> CartResponse:
    return CartResponse(cart=cart.add_item(session_id, body))


@router.patch("/items/{index}", response_model=CartResponse)
def update_item_quantity(
    index: int,
    body: CartQuantityUpdate,
    session_id: SessionId,
    cart: CartService = Depends(get_cart_service),
) -> CartResponse:
    """Quantities outside 1-99 are clamped."""
    return CartResponse(cart=cart.update_quantity(session_id, index, body.quantity))


@router.delete("/items/{index}", response_model=CartResponse)
def remove_item(
    index: int,
    session_id: SessionId,
    cart: CartService = Depends(get_cart_service),
) -> CartResponse:
    return CartResponse(cart=cart.remove_item(session_id, index))


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def clear_cart(
    session_id: SessionId,
    cart: CartService = Depends(get_cart_service),
) -> Response:
    cart.clear(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/checkout", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(ORDER_RATE)
def checkout(
    request: Request,
    background_tasks: BackgroundTasks,
    session_id: SessionId,
    body: CheckoutRequest | None = None,
    cart: CartService = Depends(get_cart_service),
    ctx: dict[str, Any] | None = Depends(optional_user_context),
) -> OrderResponse:
    """Place the cart as an order for its table and empty it."""
    order = cart.checkout(session_id, body or CheckoutRequest(), ctx)
    background_tasks.add_task(publish_order_created, OrderService.to_event_payload(order))
    return OrderResponse(order=order)
