"""
Staff management endpoints.
"""

from typing import Any

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.security.permissions import Permission
from shared.utils.schemas import StaffCreate, StaffListResponse, StaffResponse
from rest_api.services.domain import StaffService

from ._base import requires


router = APIRouter(tags=["admin-staff"])


@router.get("/staff", response_model=StaffListResponse)
def list_staff(
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(requires(Permission.MANAGE_STAFF)),
) -> StaffListResponse:
    return StaffListResponse(staff=StaffService(db).list_all())


@router.post("/staff", response_model=StaffResponse, status_code=status.HTTP_201_CREATED)
def create_staff(
    body: StaffCreate,
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(requires(Permission.MANAGE_STAFF)),
) -> StaffResponse:
    """Create a kitchen_staff, manager or admin account."""
    return StaffResponse(staff=StaffService(db).create(body, actor=ctx))
