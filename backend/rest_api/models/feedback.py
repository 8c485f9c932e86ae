"""
Feedback model.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import BigInteger, Boolean, CheckConstraint, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import AuditMixin, Base, BigIntId

if TYPE_CHECKING:
    from .order import Order
    from .user import User


class Feedback(AuditMixin, Base):
    """Ratings left for a delivered order. One per order."""

    __tablename__ = "feedback"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("customer_order.id"), nullable=False, unique=True
    )
    customer_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("app_user.id"), index=True
    )
    table_number: Mapped[int] = mapped_column(Integer, nullable=False)
    food_rating: Mapped[int] = mapped_column(Integer, nullable=False)
    service_rating: Mapped[int] = mapped_column(Integer, nullable=False)
    overall_rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[Optional[str]] = mapped_column(Text)
    would_recommend: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    order: Mapped["Order"] = relationship(back_populates="feedback")
    customer: Mapped[Optional["User"]] = relationship()

    __table_args__ = (
        CheckConstraint("food_rating BETWEEN 1 AND 5", name="ck_feedback_food_rating"),
        CheckConstraint("service_rating BETWEEN 1 AND 5", name="ck_feedback_service_rating"),
        CheckConstraint("overall_rating BETWEEN 1 AND 5", name="ck_feedback_overall_rating"),
    )

    def __repr__(self) -> str:
        return f"<Feedback(id={self.id}, order_id={self.order_id}, overall={self.overall_rating})>"
