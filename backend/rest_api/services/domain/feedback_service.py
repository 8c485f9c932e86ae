"""
Feedback Domain Service.

Diners rate a delivered order once. Staff read the list and aggregate stats.
"""

from typing import Any

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session, joinedload

from shared.config.constants import Limits, OrderStatus, Roles
from shared.config.logging import get_logger
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import DuplicateEntityError, InvalidStateError, OrderNotFoundError
from shared.utils.schemas import FeedbackCreate
from rest_api.models import Feedback, Order

logger = get_logger(__name__)


class FeedbackService:
    def __init__(self, db: Session):
        self._db = db

    def create(self, data: FeedbackCreate, ctx: dict[str, Any] | None = None) -> Feedback:
        """
        Raises:
            OrderNotFoundError
            InvalidStateError: the order has not been delivered
            DuplicateEntityError: feedback already exists for the order
        """
        order = self._db.scalar(
            select(Order).where(Order.id == data.order_id, Order.is_active.is_(True))
        )
        if order is None:
            raise OrderNotFoundError(data.order_id)
        if order.status != OrderStatus.DELIVERED:
            raise InvalidStateError("order", order.status, "leave feedback", order_id=order.id)

        existing = self._db.scalar(select(Feedback.id).where(Feedback.order_id == order.id))
        if existing is not None:
            raise DuplicateEntityError("Feedback", f"order {order.id}")

        customer_id = order.customer_id
        if customer_id is None and ctx and ctx.get("role") == Roles.CUSTOMER:
            customer_id = ctx["user_id"]

        feedback = Feedback(
            order_id=order.id,
            customer_id=customer_id,
            table_number=order.table_number,
            food_rating=data.food_rating,
            service_rating=data.service_rating,
            overall_rating=data.overall_rating,
            comment=data.comment,
            would_recommend=data.would_recommend,
        )
        self._db.add(feedback)
        safe_commit(self._db, "feedback submission")
        self._db.refresh(feedback)

        logger.info(
            "Feedback received",
            feedback_id=feedback.id,
            order_id=order.id,
            overall_rating=feedback.overall_rating,
        )
        return feedback

    def list_recent(self, limit: int = Limits.DEFAULT_PAGE_SIZE) -> list[Feedback]:
        limit = max(1, min(limit, Limits.MAX_PAGE_SIZE))
        return list(
            self._db.scalars(
                select(Feedback)
                .options(joinedload(Feedback.customer), joinedload(Feedback.order))
                .where(Feedback.is_active.is_(True))
                .order_by(Feedback.created_at.desc(), Feedback.id.desc())
                .limit(limit)
            ).all()
        )

    def stats(self) -> dict[str, Any]:
        row = self._db.execute(
            select(
                func.count(Feedback.id),
                func.avg(Feedback.food_rating),
                func.avg(Feedback.service_rating),
                func.avg(Feedback.overall_rating),
                func.sum(case((Feedback.would_recommend.is_(True), 1), else_=0)),
            ).where(Feedback.is_active.is_(True))
        ).one()
        total, avg_food, avg_service, avg_overall, recommended = row
        total = total or 0

        def _round(value) -> float:
            return round(float(value or 0), 1)

        return {
            "avg_food_rating": _round(avg_food),
            "avg_service_rating": _round(avg_service),
            "avg_overall_rating": _round(avg_overall),
            "recommendation_rate": round((recommended or 0) * 100 / total, 1) if total else 0.0,
            "total_feedback": total,
        }
