"""
User model: customers and staff share one table, distinguished by role.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import JSON, Boolean, CheckConstraint, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import Roles, STAFF_ROLES

from .base import AuditMixin, Base, BigIntId

if TYPE_CHECKING:
    from .order import Order


class User(AuditMixin, Base):
    """
    A customer or a staff member (kitchen_staff, manager, admin).
    Customers may carry a health profile used for allergy alerts and
    recommendations.
    """

    __tablename__ = "app_user"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(Text)
    role: Mapped[str] = mapped_column(String(32), nullable=False, default=Roles.CUSTOMER, index=True)

    # Health profile
    allergies: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    dietary_plan: Mapped[str] = mapped_column(Text, nullable=False, default="")
    health_goals: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    health_profile_created: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    orders: Mapped[list["Order"]] = relationship(
        back_populates="customer", foreign_keys="Order.customer_id"
    )

    __table_args__ = (
        CheckConstraint(
            "role IN ('customer', 'kitchen_staff', 'manager', 'admin')",
            name="ck_user_role",
        ),
        Index("ix_user_role_active", "role", "is_active"),
    )

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    @property
    def health_profile(self) -> dict[str, Any]:
        return {
            "allergies": list(self.allergies or []),
            "dietary_plan": self.dietary_plan or "",
            "health_goals": list(self.health_goals or []),
            "is_created": self.health_profile_created,
        }

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
