"""
Menu router.
Public browsing plus menu management for MANAGE_MENU holders.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.security.auth import current_user_context
from shared.security.permissions import Permission, require_permission
from shared.utils.schemas import (
    AvailabilityUpdate,
    CategoriesResponse,
    MenuItemCreate,
    MenuItemResponse,
    MenuItemUpdate,
    MenuListResponse,
    PortionLiteral,
)
from rest_api.services.domain import MenuService


router = APIRouter(prefix="/api/menu", tags=["menu"])


@router.get("", response_model=MenuListResponse)
def list_menu(
    available: bool | None = Query(default=None),
    category: str | None = Query(default=None),
    db: Session = Depends(get_db),
) -> MenuListResponse:
    return MenuListResponse(items=MenuService(db).list_items(available=available, category=category))


@router.get("/categories", response_model=CategoriesResponse)
def list_categories(db: Session = Depends(get_db)) -> CategoriesResponse:
    return CategoriesResponse(categories=MenuService(db).list_categories())


@router.get("/{item_id}", response_model=MenuItemResponse)
def get_menu_item(
    item_id: int,
    portion: PortionLiteral | None = Query(default=None),
    db: Session = Depends(get_db),
) -> MenuItemResponse:
    """One item; ``?portion=Large`` scales the nutrition panel."""
    return MenuItemResponse(item=MenuService(db).get_item_view(item_id, portion))


@router.post("", response_model=MenuItemResponse, status_code=status.HTTP_201_CREATED)
def create_menu_item(
    body: MenuItemCreate,
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(current_user_context),
) -> MenuItemResponse:
    require_permission(ctx, Permission.MANAGE_MENU)
    return MenuItemResponse(item=MenuService(db).create_item(body, actor=ctx))


@router.put("/{item_id}", response_model=MenuItemResponse)
def update_menu_item(
    item_id: int,
    body: MenuItemUpdate,
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(current_user_context),
) -> MenuItemResponse:
    require_permission(ctx, Permission.MANAGE_MENU)
    return MenuItemResponse(item=MenuService(db).update_item(item_id, body, actor=ctx))


@router.patch("/{item_id}/availability", response_model=MenuItemResponse)
def set_menu_item_availability(
    item_id: int,
    body: AvailabilityUpdate,
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(current_user_context),
) -> MenuItemResponse:
    require_permission(ctx, Permission.MANAGE_MENU)
    return MenuItemResponse(item=MenuService(db).set_availability(item_id, body.is_available, actor=ctx))


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_menu_item(
    item_id: int,
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(current_user_context),
) -> Response:
    """Soft delete: the item leaves the menu but past orders keep their lines."""
    require_permission(ctx, Permission.MANAGE_MENU)
    MenuService(db).delete_item(item_id, actor=ctx)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
