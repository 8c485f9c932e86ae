"""
Order Domain Service.

Checkout, lookup and every lifecycle mutation of an order. Routers stay
thin: they check capabilities, call into this service and schedule event
publishing with the payload from ``to_event_payload``.

Every mutation locks the order row, checks ``expected_version`` when the
caller sends one, bumps ``version`` and commits through ``safe_commit``.
"""

from typing import Any, Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from shared.config.constants import (
    ORDER_STATUS_TIMESTAMPS,
    Limits,
    OrderStatus,
    Priority,
    Roles,
    next_order_status,
    validate_order_transition,
)
from shared.config.logging import kitchen_logger, order_logger as logger
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import (
    InvalidStateError,
    InvalidTransitionError,
    MenuItemNotFoundError,
    OrderNotFoundError,
    StaleVersionError,
    ValidationError,
)
from shared.utils.schemas import OrderCreate
from rest_api.models import MenuItem, Order, OrderItem, User
from rest_api.models.base import utcnow

from .order_lifecycle import build_kitchen_queue
from .pricing import compute_totals, line_amount, line_total
from .table_service import TableService


def format_order_number(order_id: int) -> str:
    return f"ORD-{order_id:06d}"


def compute_allergy_alerts(
    allergies: Iterable[str],
    items: Iterable[tuple[str, Iterable[str]]],
) -> list[str]:
    """
    "<Allergen> in <Item>" for every item allergen the diner is allergic to.
    Case-insensitive, deduplicated, first-seen order.
    """
    wanted = {a.strip().lower() for a in allergies if a and a.strip()}
    if not wanted:
        return []
    alerts: list[str] = []
    for item_name, allergens in items:
        for allergen in allergens or []:
            alert = f"{allergen} in {item_name}"
            if allergen.strip().lower() in wanted and alert not in alerts:
                alerts.append(alert)
    return alerts


class OrderService:
    """Domain service for orders."""

    def __init__(self, db: Session):
        self._db = db

    # =========================================================================
    # Checkout
    # =========================================================================

    def _load_menu_items(self, menu_item_ids: Sequence[int]) -> dict[int, MenuItem]:
        found = self._db.scalars(
            select(MenuItem).where(
                MenuItem.id.in_(set(menu_item_ids)),
                MenuItem.is_active.is_(True),
            )
        ).all()
        return {item.id: item for item in found}

    def create_order(self, data: OrderCreate, ctx: dict[str, Any] | None = None) -> Order:
        """
        Create an order from client lines, re-priced from the current menu.

        Raises:
            MenuItemNotFoundError: an item does not exist or was deleted
            ValidationError: an item is unavailable
        """
        if not data.items:
            raise ValidationError("Order must contain at least one item")

        menu = self._load_menu_items([line.menu_item_id for line in data.items])

        order_items: list[OrderItem] = []
        for line in data.items:
            item = menu.get(line.menu_item_id)
            if item is None:
                raise MenuItemNotFoundError(line.menu_item_id)
            if not item.is_available:
                raise ValidationError(
                    f"'{item.name}' is currently unavailable",
                    menu_item_id=item.id,
                )
            custom = line.customizations
            order_items.append(
                OrderItem(
                    menu_item_id=item.id,
                    name=item.name,
                    unit_price=item.price,
                    quantity=line.quantity,
                    portion=custom.portion,
                    spice_level=custom.spice_level,
                    removed_ingredients=list(custom.removed_ingredients),
                    special_instructions=custom.special_instructions,
                    line_total=line_total(item.price, custom.portion, line.quantity),
                )
            )

        totals = compute_totals(line_amount(oi.unit_price, oi.portion, oi.quantity) for oi in order_items)

        customer_id = ctx["user_id"] if ctx else None
        allergy_alerts: list[str] = []
        if ctx and ctx.get("role") == Roles.CUSTOMER:
            customer = self._db.get(User, customer_id)
            if customer is not None and customer.allergies:
                allergy_alerts = compute_allergy_alerts(
                    customer.allergies,
                    ((menu[oi.menu_item_id].name, menu[oi.menu_item_id].allergens) for oi in order_items),
                )

        tables = TableService(self._db)
        tables.get_or_create(data.table_number)

        order = Order(
            table_number=data.table_number,
            customer_id=customer_id,
            guest_name=data.guest_name,
            subtotal=totals.subtotal,
            tax=totals.tax,
            total=totals.total,
            status=OrderStatus.RECEIVED,
            priority=Priority.NORMAL,
            version=1,
            estimated_prep_time=max(menu[oi.menu_item_id].preparation_time for oi in order_items),
            special_requests=data.special_requests,
            allergy_alerts=allergy_alerts,
            items=order_items,
        )
        self._db.add(order)
        self._db.flush()
        order.order_number = format_order_number(order.id)

        tables.refresh_occupancy(data.table_number)
        safe_commit(self._db, "order creation")
        self._db.refresh(order)

        logger.info(
            "Order created",
            order_id=order.id,
            order_number=order.order_number,
            table_number=order.table_number,
            total=str(order.total),
            item_count=sum(oi.quantity for oi in order_items),
            allergy_alerts=len(allergy_alerts),
        )
        return order

    # =========================================================================
    # Queries
    # =========================================================================

    def get_order(self, order_id: int) -> Order:
        order = self._db.scalar(
            select(Order)
            .options(selectinload(Order.items))
            .where(Order.id == order_id, Order.is_active.is_(True))
        )
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    def list_orders(
        self,
        status: str | None = None,
        table_number: int | None = None,
        customer_id: int | None = None,
        limit: int = Limits.DEFAULT_PAGE_SIZE,
    ) -> list[Order]:
        """Newest first."""
        stmt = (
            select(Order)
            .options(selectinload(Order.items))
            .where(Order.is_active.is_(True))
        )
        if status:
            stmt = stmt.where(Order.status == status)
        if table_number is not None:
            stmt = stmt.where(Order.table_number == table_number)
        if customer_id is not None:
            stmt = stmt.where(Order.customer_id == customer_id)
        limit = max(1, min(limit, Limits.MAX_PAGE_SIZE))
        stmt = stmt.order_by(Order.created_at.desc(), Order.id.desc()).limit(limit)
        return list(self._db.scalars(stmt).all())

    def list_active(self) -> list[Order]:
        """Non-terminal orders in arrival order."""
        return list(
            self._db.scalars(
                select(Order)
                .options(selectinload(Order.items))
                .where(
                    Order.status.in_(OrderStatus.ACTIVE),
                    Order.is_active.is_(True),
                )
                .order_by(Order.created_at.asc(), Order.id.asc())
            ).all()
        )

    def kitchen_queue(self) -> dict[str, list[Order]]:
        return build_kitchen_queue(self.list_active())

    # =========================================================================
    # Mutations
    # =========================================================================

    def _lock(self, order_id: int) -> Order:
        order = self._db.scalar(
            select(Order)
            .where(Order.id == order_id, Order.is_active.is_(True))
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    @staticmethod
    def _check_version(order: Order, expected_version: int | None) -> None:
        if expected_version is not None and expected_version != order.version:
            raise StaleVersionError("Order", expected_version, order.version, order_id=order.id)

    def update_status(
        self,
        order_id: int,
        new_status: str,
        actor: dict[str, Any] | None = None,
        expected_version: int | None = None,
    ) -> Order:
        """
        Move an order to ``new_status``.

        Raises:
            OrderNotFoundError
            StaleVersionError: ``expected_version`` does not match
            InvalidTransitionError: not a legal step from the current status
        """
        order = self._lock(order_id)
        self._check_version(order, expected_version)

        old_status = order.status
        if not validate_order_transition(old_status, new_status):
            raise InvalidTransitionError("order", old_status, new_status, order_id=order.id)

        now = utcnow()
        order.status = new_status
        order.version += 1
        stamp = ORDER_STATUS_TIMESTAMPS.get(new_status)
        if stamp:
            setattr(order, stamp, now)
        if new_status == OrderStatus.PREPARING and actor:
            order.handled_by_id = actor.get("user_id")

        self._db.flush()
        if new_status in OrderStatus.TERMINAL:
            TableService(self._db).refresh_occupancy(order.table_number)

        safe_commit(self._db, "order status update")
        self._db.refresh(order)

        logger.info(
            "Order status changed",
            order_id=order.id,
            from_status=old_status,
            to_status=new_status,
            version=order.version,
            actor_id=actor.get("user_id") if actor else None,
        )
        return order

    def advance(
        self,
        order_id: int,
        actor: dict[str, Any] | None = None,
        expected_version: int | None = None,
    ) -> Order:
        """Apply the single forward step from the current status."""
        current = self.get_order(order_id).status
        target = next_order_status(current)
        if target is None:
            raise InvalidStateError("order", current, "advance", order_id=order_id)
        return self.update_status(order_id, target, actor, expected_version)

    def update_priority(
        self,
        order_id: int,
        priority: int,
        actor: dict[str, Any] | None = None,
        expected_version: int | None = None,
    ) -> Order:
        """
        Set kitchen priority. Status is never touched.

        Raises:
            ValidationError: priority outside {1, 2, 3}
            InvalidStateError: the order is delivered or cancelled
        """
        if priority not in Priority.ALL:
            raise ValidationError("Priority must be 1, 2 or 3", priority=priority)

        order = self._lock(order_id)
        self._check_version(order, expected_version)
        if order.is_terminal:
            raise InvalidStateError("order", order.status, "set priority", order_id=order.id)

        old_priority = order.priority
        order.priority = priority
        order.version += 1
        safe_commit(self._db, "priority update")
        self._db.refresh(order)

        kitchen_logger.info(
            "Order priority changed",
            order_id=order.id,
            from_priority=old_priority,
            to_priority=priority,
            version=order.version,
            actor_id=actor.get("user_id") if actor else None,
        )
        return order

    def get_for_service_request(self, order_id: int, request_type: str) -> Order:
        """Order a waiter or bill request is made from; cancelled orders are refused."""
        order = self.get_order(order_id)
        if order.status == OrderStatus.CANCELLED:
            raise InvalidStateError("order", order.status, f"request {request_type}", order_id=order.id)
        logger.info(
            "Service requested",
            order_id=order.id,
            table_number=order.table_number,
            request_type=request_type,
        )
        return order

    # =========================================================================
    # Events
    # =========================================================================

    @staticmethod
    def to_event_payload(order: Order) -> dict[str, Any]:
        """Plain snapshot for background publishers (safe after the session closes)."""
        return {
            "id": order.id,
            "order_number": order.order_number,
            "table_number": order.table_number,
            "status": order.status,
            "priority": order.priority,
            "version": order.version,
        }
