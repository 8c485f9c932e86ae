"""
Reporting Domain Service.

Dashboard, analytics, service metrics and staff performance for the back
office. Rows are fetched with plain selects and aggregated in Python so the
same code runs on PostgreSQL and SQLite. "Today" is the current UTC day.
"""

from collections import defaultdict
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Iterable

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from shared.config.constants import STAFF_ROLES, AnalyticsPeriod, Limits, OrderStatus
from shared.config.logging import get_logger
from shared.utils.exceptions import ValidationError
from rest_api.models import Feedback, Order, OrderItem, User
from rest_api.models.base import as_utc, utcnow

from .pricing import quantize_money
from .table_service import TableService

logger = get_logger(__name__)


def start_of_utc_day(now: datetime | None = None) -> datetime:
    now = now or utcnow()
    return now.astimezone(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)


def minutes_between(start: datetime | None, end: datetime | None) -> float | None:
    if start is None or end is None:
        return None
    return (as_utc(end) - as_utc(start)).total_seconds() / 60


def prep_minutes(order: Order) -> float | None:
    """created -> ready, in minutes."""
    return minutes_between(order.created_at, order.ready_at)


def _average(values: Iterable[float | None]) -> float:
    present = [v for v in values if v is not None]
    if not present:
        return 0.0
    return round(sum(present) / len(present), 1)


class ReportingService:
    def __init__(self, db: Session):
        self._db = db

    def _orders(self, since: datetime | None = None) -> list[Order]:
        stmt = select(Order).where(Order.is_active.is_(True))
        if since is not None:
            stmt = stmt.where(Order.created_at >= since)
        return list(self._db.scalars(stmt.order_by(Order.created_at, Order.id)).all())

    # =========================================================================
    # Dashboard
    # =========================================================================

    def dashboard(self) -> dict[str, Any]:
        today = self._orders(since=start_of_utc_day())
        billable = [o for o in today if o.status != OrderStatus.CANCELLED]
        tables = TableService(self._db)

        active_orders = self._db.scalar(
            select(func.count(Order.id)).where(
                Order.status.in_(OrderStatus.ACTIVE),
                Order.is_active.is_(True),
            )
        ) or 0
        avg_rating = self._db.scalar(
            select(func.avg(Feedback.overall_rating)).where(Feedback.is_active.is_(True))
        )

        return {
            "orders": len(today),
            "revenue": quantize_money(sum((o.total for o in billable), Decimal(0))),
            "active_orders": active_orders,
            "tables_occupied": tables.count_occupied(),
            "total_tables": tables.count_total(),
            "avg_prep_time": _average(prep_minutes(o) for o in today),
            "avg_rating": round(float(avg_rating or 0), 1),
        }

    # =========================================================================
    # Analytics
    # =========================================================================

    def popular_items(self, since: datetime | None = None, limit: int = Limits.TOP_ITEMS) -> list[dict[str, Any]]:
        """Items ranked by quantity ordered in non-cancelled orders."""
        stmt = (
            select(OrderItem)
            .join(Order, OrderItem.order_id == Order.id)
            .where(
                Order.status != OrderStatus.CANCELLED,
                Order.is_active.is_(True),
            )
        )
        if since is not None:
            stmt = stmt.where(Order.created_at >= since)

        ranked: dict[int, dict[str, Any]] = {}
        for line in self._db.scalars(stmt).all():
            entry = ranked.setdefault(
                line.menu_item_id,
                {
                    "menu_item_id": line.menu_item_id,
                    "name": line.name,
                    "category": line.menu_item.category if line.menu_item else "",
                    "total_ordered": 0,
                    "revenue": Decimal(0),
                },
            )
            entry["total_ordered"] += line.quantity
            entry["revenue"] += line.line_total

        items = sorted(ranked.values(), key=lambda e: (-e["total_ordered"], e["menu_item_id"]))
        for entry in items:
            entry["revenue"] = quantize_money(entry["revenue"])
        return items[:limit]

    def analytics(self, period: str = AnalyticsPeriod.WEEK) -> dict[str, Any]:
        if period not in AnalyticsPeriod.DAYS:
            raise ValidationError(
                f"Period must be one of {', '.join(AnalyticsPeriod.DAYS)}",
                period=period,
            )
        days = AnalyticsPeriod.DAYS[period]
        since = start_of_utc_day() - timedelta(days=days - 1)
        orders = self._orders(since=since)
        billable = [o for o in orders if o.status != OrderStatus.CANCELLED]

        total_revenue = quantize_money(sum((o.total for o in billable), Decimal(0)))
        avg_order_value = quantize_money(total_revenue / len(billable)) if billable else Decimal("0.00")

        by_status = {status: 0 for status in OrderStatus.ALL}
        for order in orders:
            by_status[order.status] = by_status.get(order.status, 0) + 1

        by_day: dict[str, dict[str, Any]] = defaultdict(lambda: {"revenue": Decimal(0), "orders": 0})
        for order in billable:
            day = as_utc(order.created_at).date().isoformat()
            by_day[day]["revenue"] += order.total
            by_day[day]["orders"] += 1

        return {
            "period": period,
            "total_orders": len(orders),
            "total_revenue": total_revenue,
            "avg_order_value": avg_order_value,
            "orders_by_status": by_status,
            "popular_items": self.popular_items(since=since),
            "revenue_by_day": [
                {"date": day, "revenue": quantize_money(v["revenue"]), "orders": v["orders"]}
                for day, v in sorted(by_day.items())
            ],
        }

    # =========================================================================
    # Service metrics
    # =========================================================================

    def service_metrics(self) -> dict[str, Any]:
        orders = self._orders()
        prep = [m for m in (prep_minutes(o) for o in orders) if m is not None]
        total = [
            m for m in (minutes_between(o.created_at, o.delivered_at) for o in orders) if m is not None
        ]
        delivered = sum(1 for o in orders if o.status == OrderStatus.DELIVERED)
        cancelled = sum(1 for o in orders if o.status == OrderStatus.CANCELLED)
        finished = delivered + cancelled

        return {
            "avg_prep_time": _average(prep),
            "avg_total_time": _average(total),
            "max_prep_time": round(max(prep), 1) if prep else 0.0,
            "min_prep_time": round(min(prep), 1) if prep else 0.0,
            "order_accuracy": round(delivered * 100 / finished, 1) if finished else 100.0,
            "total_orders": len(orders),
        }

    # =========================================================================
    # Staff performance
    # =========================================================================

    def staff_performance(self) -> list[dict[str, Any]]:
        staff = self._db.scalars(
            select(User)
            .where(User.role.in_(STAFF_ROLES), User.is_active.is_(True))
            .order_by(User.name, User.id)
        ).all()

        handled: dict[int, list[Order]] = defaultdict(list)
        for order in self._db.scalars(
            select(Order).where(Order.handled_by_id.is_not(None), Order.is_active.is_(True))
        ).all():
            handled[order.handled_by_id].append(order)

        report = [
            {
                "staff_id": member.id,
                "name": member.name,
                "role": member.role,
                "orders_handled": len(handled[member.id]),
                "avg_prep_time": _average(prep_minutes(o) for o in handled[member.id]),
            }
            for member in staff
        ]
        report.sort(key=lambda r: -r["orders_handled"])
        return report
