"""
Table Domain Service.

Tables are created lazily on the first checkout for a number and flip
between available and occupied as their orders come and go.
"""

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shared.config.constants import Limits, OrderStatus, TableStatus
from shared.config.logging import get_logger
from shared.utils.exceptions import NotFoundError, ValidationError
from rest_api.models import DiningTable, Order

logger = get_logger(__name__)


class TableService:
    """Dining table lookup and occupancy."""

    def __init__(self, db: Session):
        self._db = db

    @staticmethod
    def validate_number(number: int) -> int:
        if not Limits.MIN_TABLE_NUMBER <= number <= Limits.MAX_TABLE_NUMBER:
            raise ValidationError(
                f"Table number must be between {Limits.MIN_TABLE_NUMBER} and {Limits.MAX_TABLE_NUMBER}",
                table_number=number,
            )
        return number

    def get_by_number(self, number: int) -> DiningTable | None:
        return self._db.scalar(
            select(DiningTable).where(
                DiningTable.number == number,
                DiningTable.is_active.is_(True),
            )
        )

    def get_or_create(self, number: int) -> DiningTable:
        """Existing table for ``number``, or a new one added to the session (not committed)."""
        self.validate_number(number)
        table = self.get_by_number(number)
        if table is not None:
            return table

        try:
            with self._db.begin_nested():
                table = DiningTable(number=number)
                self._db.add(table)
                self._db.flush()
        except IntegrityError:
            # A concurrent checkout inserted the same number first
            logger.info("Table created concurrently, reusing it", table_number=number)
            return self._db.scalar(select(DiningTable).where(DiningTable.number == number))

        logger.info("Table created on first order", table_number=number)
        return table

    def count_active_orders(self, number: int) -> int:
        return self._db.scalar(
            select(func.count(Order.id)).where(
                Order.table_number == number,
                Order.status.in_(OrderStatus.ACTIVE),
                Order.is_active.is_(True),
            )
        ) or 0

    def refresh_occupancy(self, number: int) -> DiningTable | None:
        """
        Recompute status from the table's active orders. Call after flushing
        the order change, inside the same transaction.
        """
        table = self.get_by_number(number)
        if table is None:
            return None
        new_status = TableStatus.OCCUPIED if self.count_active_orders(number) else TableStatus.AVAILABLE
        if table.status != new_status:
            logger.debug("Table occupancy changed", table_number=number, status=new_status)
            table.status = new_status
        return table

    def scan(self, number: int) -> dict[str, Any]:
        """Table landing data for a QR scan."""
        self.validate_number(number)
        table = self.get_by_number(number)
        if table is None:
            raise NotFoundError("Table", number)
        return {
            "number": table.number,
            "capacity": table.capacity,
            "status": table.status,
            "active_orders": self.count_active_orders(number),
        }

    def count_occupied(self) -> int:
        return self._db.scalar(
            select(func.count(DiningTable.id)).where(
                DiningTable.status == TableStatus.OCCUPIED,
                DiningTable.is_active.is_(True),
            )
        ) or 0

    def count_total(self) -> int:
        return self._db.scalar(
            select(func.count(DiningTable.id)).where(DiningTable.is_active.is_(True))
        ) or 0
