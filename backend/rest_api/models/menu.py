"""
Menu model.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import JSON, Boolean, CheckConstraint, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import AuditMixin, Base, BigIntId


class MenuItem(AuditMixin, Base):
    """
    A dish or drink on the menu.

    ``is_available`` toggles independently of the rest of the record;
    ``is_active`` (AuditMixin) is the soft delete flag. Large portions are not
    stored: they are priced and scaled at order time.
    """

    __tablename__ = "menu_item"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    image: Mapped[Optional[str]] = mapped_column(Text)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    ingredients: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    allergens: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    serves: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    preparation_time: Mapped[int] = mapped_column(Integer, nullable=False, default=15)
    nutrition_per_serving: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    __table_args__ = (
        CheckConstraint("price > 0", name="ck_menu_item_price_positive"),
        CheckConstraint("serves >= 1", name="ck_menu_item_serves"),
        CheckConstraint("preparation_time >= 0", name="ck_menu_item_prep_time"),
        Index("ix_menu_item_category_available", "category", "is_available"),
    )

    def __repr__(self) -> str:
        return f"<MenuItem(id={self.id}, name='{self.name}', price={self.price})>"
