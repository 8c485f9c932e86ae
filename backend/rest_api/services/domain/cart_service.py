"""
Cart Domain Service.

The cart lives in a ClientSession (table + pending lines) persisted through
the session store, never in the database. Each add appends a new line; lines
are addressed by position. Prices shown in the cart come from the menu at the
time of the add and are re-checked at checkout.
"""

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from shared.config.logging import get_logger
from shared.infrastructure.session_store import ClientSession, ClientSessionStore
from shared.utils.exceptions import MenuItemNotFoundError, NotFoundError, ValidationError
from shared.utils.schemas import CartItemAdd, CartLine, CheckoutRequest, OrderCreate, OrderItemInput
from rest_api.models import MenuItem, Order

from .order_service import OrderService
from .pricing import clamp_quantity, compute_totals, line_amount, quantize_money
from .table_service import TableService

logger = get_logger(__name__)


def summarize(session: ClientSession) -> dict[str, Any]:
    """Cart view with per-line totals, subtotal, tax, total and item count."""
    lines = []
    amounts = []
    for line in session.items:
        amount = line_amount(line.unit_price, line.customizations.portion, line.quantity)
        data = line.model_dump()
        data["line_total"] = quantize_money(amount)
        lines.append(data)
        amounts.append(amount)
    totals = compute_totals(amounts)
    return {
        "items": lines,
        "table_number": session.table_number,
        "subtotal": totals.subtotal,
        "tax": totals.tax,
        "total": totals.total,
        "item_count": sum(line.quantity for line in session.items),
    }


class CartService:
    """Session-backed cart."""

    def __init__(self, db: Session, store: ClientSessionStore):
        self._db = db
        self._store = store

    def _load(self, session_id: str) -> ClientSession:
        return self._store.load(ClientSessionStore.validate_session_id(session_id))

    @staticmethod
    def _line(session: ClientSession, index: int) -> CartLine:
        if not 0 <= index < len(session.items):
            raise NotFoundError("Cart item", index)
        return session.items[index]

    def get_cart(self, session_id: str) -> dict[str, Any]:
        return summarize(self._load(session_id))

    def set_table(self, session_id: str, table_number: int) -> dict[str, Any]:
        TableService.validate_number(table_number)
        session = self._load(session_id)
        session.table_number = table_number
        self._store.save(session)
        return summarize(session)

    def add_item(self, session_id: str, data: CartItemAdd) -> dict[str, Any]:
        item = self._db.scalar(
            select(MenuItem).where(
                MenuItem.id == data.menu_item_id,
                MenuItem.is_active.is_(True),
            )
        )
        if item is None:
            raise MenuItemNotFoundError(data.menu_item_id)
        if not item.is_available:
            raise ValidationError(f"'{item.name}' is currently unavailable", menu_item_id=item.id)

        session = self._load(session_id)
        session.items.append(
            CartLine(
                menu_item_id=item.id,
                name=item.name,
                unit_price=item.price,
                quantity=clamp_quantity(data.quantity),
                customizations=data.customizations,
            )
        )
        self._store.save(session)
        logger.debug("Cart item added", session_id=session_id, menu_item_id=item.id, lines=len(session.items))
        return summarize(session)

    def update_quantity(self, session_id: str, index: int, quantity: int) -> dict[str, Any]:
        """Set a line's quantity, clamped into [1, 99]."""
        session = self._load(session_id)
        self._line(session, index).quantity = clamp_quantity(quantity)
        self._store.save(session)
        return summarize(session)

    def remove_item(self, session_id: str, index: int) -> dict[str, Any]:
        session = self._load(session_id)
        self._line(session, index)
        del session.items[index]
        self._store.save(session)
        return summarize(session)

    def clear(self, session_id: str) -> None:
        self._store.clear(ClientSessionStore.validate_session_id(session_id))

    def checkout(
        self,
        session_id: str,
        data: CheckoutRequest,
        ctx: dict[str, Any] | None = None,
    ) -> Order:
        """
        Turn the cart into an order and clear it.

        Raises:
            ValidationError: empty cart, no table selected, unavailable item
            MenuItemNotFoundError: an item was removed from the menu
        """
        session = self._load(session_id)
        if not session.items:
            raise ValidationError("Cart is empty")
        if session.table_number is None:
            raise ValidationError("Select a table before checking out")

        order = OrderService(self._db).create_order(
            OrderCreate(
                table_number=session.table_number,
                items=[
                    OrderItemInput(
                        menu_item_id=line.menu_item_id,
                        quantity=line.quantity,
                        customizations=line.customizations,
                    )
                    for line in session.items
                ],
                guest_name=data.guest_name,
                special_requests=data.special_requests,
            ),
            ctx,
        )
        # Keep the table so the diner can order again without re-scanning
        self._store.save(ClientSession(session_id=session.session_id, table_number=session.table_number))
        logger.info("Cart checked out", session_id=session_id, order_id=order.id)
        return order
