"""
Menu Domain Service.

Browse, manage and soft delete menu items. Deleted items disappear from every
listing but stay referenced by historical order lines.
"""

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from shared.config.constants import MenuCategory, Portion
from shared.config.logging import get_logger
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import MenuItemNotFoundError, ValidationError
from shared.utils.schemas import MenuItemCreate, MenuItemUpdate
from rest_api.models import MenuItem

from .pricing import scale_nutrition

logger = get_logger(__name__)


class MenuService:
    """Domain service for menu items."""

    def __init__(self, db: Session):
        self._db = db

    def list_items(
        self,
        available: bool | None = None,
        category: str | None = None,
    ) -> list[MenuItem]:
        """Active items by category then name."""
        stmt = select(MenuItem).where(MenuItem.is_active.is_(True))
        if available is not None:
            stmt = stmt.where(MenuItem.is_available.is_(available))
        if category:
            if category not in MenuCategory.ALL:
                raise ValidationError(f"Unknown category '{category}'", category=category)
            stmt = stmt.where(MenuItem.category == category)
        stmt = stmt.order_by(MenuItem.category, MenuItem.name, MenuItem.id)
        return list(self._db.scalars(stmt).all())

    def list_categories(self) -> list[str]:
        """Categories that currently have at least one active item, in menu order."""
        used = set(
            self._db.scalars(
                select(MenuItem.category).where(MenuItem.is_active.is_(True)).distinct()
            ).all()
        )
        return [c for c in MenuCategory.ALL if c in used]

    def get_item(self, item_id: int) -> MenuItem:
        item = self._db.scalar(
            select(MenuItem).where(MenuItem.id == item_id, MenuItem.is_active.is_(True))
        )
        if item is None:
            raise MenuItemNotFoundError(item_id)
        return item

    def get_item_view(self, item_id: int, portion: str | None = None) -> dict[str, Any]:
        """Item as a dict, nutrition scaled to ``portion``."""
        if portion is not None and portion not in Portion.ALL:
            raise ValidationError(f"Unknown portion '{portion}'", portion=portion)
        item = self.get_item(item_id)
        return self.to_dict(item, nutrition=scale_nutrition(item.nutrition_per_serving, portion))

    @staticmethod
    def to_dict(item: MenuItem, nutrition: dict[str, Any] | None = None) -> dict[str, Any]:
        return {
            "id": item.id,
            "name": item.name,
            "description": item.description,
            "price": item.price,
            "category": item.category,
            "image": item.image,
            "is_available": item.is_available,
            "ingredients": list(item.ingredients or []),
            "allergens": list(item.allergens or []),
            "serves": item.serves,
            "preparation_time": item.preparation_time,
            "nutrition_per_serving": nutrition if nutrition is not None else dict(item.nutrition_per_serving or {}),
        }

    def create_item(self, data: MenuItemCreate, actor: dict[str, Any] | None = None) -> MenuItem:
        fields = data.model_dump()
        item = MenuItem(**fields)
        self._db.add(item)
        safe_commit(self._db)
        self._db.refresh(item)
        logger.info(
            "Menu item created",
            menu_item_id=item.id,
            name=item.name,
            actor_id=actor.get("user_id") if actor else None,
        )
        return item

    def update_item(
        self,
        item_id: int,
        data: MenuItemUpdate,
        actor: dict[str, Any] | None = None,
    ) -> MenuItem:
        """Apply the fields that were sent."""
        item = self.get_item(item_id)
        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            if value is None and field not in ("image",):
                continue
            setattr(item, field, value)
        safe_commit(self._db)
        self._db.refresh(item)
        logger.info(
            "Menu item updated",
            menu_item_id=item.id,
            fields=sorted(changes),
            actor_id=actor.get("user_id") if actor else None,
        )
        return item

    def set_availability(
        self,
        item_id: int,
        is_available: bool,
        actor: dict[str, Any] | None = None,
    ) -> MenuItem:
        item = self.get_item(item_id)
        item.is_available = is_available
        safe_commit(self._db)
        self._db.refresh(item)
        logger.info(
            "Menu item availability changed",
            menu_item_id=item.id,
            is_available=is_available,
            actor_id=actor.get("user_id") if actor else None,
        )
        return item

    def delete_item(self, item_id: int, actor: dict[str, Any] | None = None) -> None:
        item = self.get_item(item_id)
        item.soft_delete(
            actor.get("user_id") if actor else None,
            actor.get("email") if actor else None,
        )
        safe_commit(self._db)
        logger.info("Menu item deleted", menu_item_id=item_id, actor_id=item.deleted_by_id)
