"""
Order Models: Order, OrderItem.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    JSON,
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import OrderStatus, Portion, Priority

from .base import AuditMixin, Base, BigIntId

if TYPE_CHECKING:
    from .feedback import Feedback
    from .menu import MenuItem
    from .user import User


class Order(AuditMixin, Base):
    """
    A checked-out cart moving through the kitchen pipeline.

    ``version`` starts at 1 and is bumped on every mutation so clients can
    drop stale payloads; ``handled_by_id`` is the staff member who started
    preparation.
    """

    __tablename__ = "customer_order"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    order_number: Mapped[Optional[str]] = mapped_column(String(20), unique=True)
    table_number: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    customer_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("app_user.id"), index=True
    )
    guest_name: Mapped[Optional[str]] = mapped_column(Text)

    subtotal: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    tax: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    total: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=OrderStatus.RECEIVED, index=True
    )
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=Priority.NORMAL)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    estimated_prep_time: Mapped[Optional[int]] = mapped_column(Integer)
    special_requests: Mapped[Optional[str]] = mapped_column(Text)
    allergy_alerts: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    preparing_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    ready_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    delivered_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    handled_by_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("app_user.id"), index=True
    )

    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order", cascade="all, delete-orphan", order_by="OrderItem.id"
    )
    customer: Mapped[Optional["User"]] = relationship(
        back_populates="orders", foreign_keys=[customer_id]
    )
    handled_by: Mapped[Optional["User"]] = relationship(foreign_keys=[handled_by_id])
    feedback: Mapped[Optional["Feedback"]] = relationship(back_populates="order", uselist=False)

    __table_args__ = (
        CheckConstraint("priority IN (1, 2, 3)", name="ck_order_priority"),
        CheckConstraint(
            "status IN ('received', 'preparing', 'quality_check', 'ready', 'delivered', 'cancelled')",
            name="ck_order_status",
        ),
        CheckConstraint("version >= 1", name="ck_order_version"),
        # Kitchen queue: active orders in arrival order
        Index("ix_order_status_created", "status", "created_at"),
    )

    @property
    def is_terminal(self) -> bool:
        return self.status in OrderStatus.TERMINAL

    def __repr__(self) -> str:
        return (
            f"<Order(id={self.id}, number='{self.order_number}', table={self.table_number}, "
            f"status='{self.status}', priority={self.priority}, v={self.version})>"
        )


class OrderItem(AuditMixin, Base):
    """
    One line of an order. Name and unit price are snapshots taken at checkout
    so later menu edits do not rewrite history.
    """

    __tablename__ = "order_item"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("customer_order.id"), nullable=False, index=True
    )
    menu_item_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("menu_item.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    portion: Mapped[str] = mapped_column(String(20), nullable=False, default=Portion.STANDARD)
    spice_level: Mapped[Optional[str]] = mapped_column(String(30))
    removed_ingredients: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    special_instructions: Mapped[Optional[str]] = mapped_column(Text)
    line_total: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    order: Mapped["Order"] = relationship(back_populates="items")
    menu_item: Mapped["MenuItem"] = relationship()

    __table_args__ = (
        CheckConstraint("quantity > 0 AND quantity <= 99", name="ck_order_item_quantity"),
        CheckConstraint("portion IN ('Standard', 'Large')", name="ck_order_item_portion"),
    )

    def __repr__(self) -> str:
        return f"<OrderItem(id={self.id}, order_id={self.order_id}, item='{self.name}', qty={self.quantity})>"
