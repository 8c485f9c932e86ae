"""
Dining table model.
"""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from shared.config.constants import TableStatus

from .base import AuditMixin, Base, BigIntId


class DiningTable(AuditMixin, Base):
    """
    A physical table identified by the number printed on its QR code.
    Created on the first checkout for that number; occupied while it has an
    active order.
    """

    __tablename__ = "dining_table"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    number: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=4)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=TableStatus.AVAILABLE)

    __table_args__ = (
        CheckConstraint("number >= 1 AND number <= 50", name="ck_dining_table_number"),
        CheckConstraint("status IN ('available', 'occupied')", name="ck_dining_table_status"),
    )

    def __repr__(self) -> str:
        return f"<DiningTable(number={self.number}, status='{self.status}')>"
