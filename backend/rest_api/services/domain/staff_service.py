"""
Staff Service.

Staff are users whose role is kitchen_staff, manager or admin. Accounts are
created by an admin; there is no self-service staff signup.

Usage:
    from rest_api.services.domain import StaffService

    service = StaffService(db)
    staff = service.list_all()
    member = service.create(data, actor=ctx)
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import User
from shared.config.constants import STAFF_ROLES
from shared.config.logging import get_logger, mask_email
from shared.infrastructure.db import safe_commit
from shared.security.password import hash_password
from shared.utils.exceptions import DuplicateEntityError, ValidationError
from shared.utils.schemas import StaffCreate

from .auth_service import normalize_email

logger = get_logger(__name__)


class StaffService:
    """Service for staff (user) management."""

    def __init__(self, db: Session):
        self._db = db

    def list_all(self, *, include_inactive: bool = False) -> list[User]:
        """Staff members by role then name."""
        stmt = select(User).where(User.role.in_(STAFF_ROLES))
        if not include_inactive:
            stmt = stmt.where(User.is_active.is_(True))
        return list(self._db.scalars(stmt.order_by(User.role, User.name, User.id)).all())

    def create(self, data: StaffCreate, actor: dict[str, Any] | None = None) -> User:
        """
        Create a staff account.

        Raises:
            ValidationError: role is not a staff role
            DuplicateEntityError: email already registered
        """
        if data.role not in STAFF_ROLES:
            raise ValidationError(f"Role '{data.role}' is not a staff role", role=data.role)

        email = normalize_email(data.email)
        if self._db.scalar(select(User.id).where(User.email == email)) is not None:
            raise DuplicateEntityError("User", email)

        user = User(
            name=data.name.strip(),
            email=email,
            password=hash_password(data.password),
            phone=data.phone,
            role=data.role,
        )
        self._db.add(user)
        safe_commit(self._db, "staff creation")
        self._db.refresh(user)

        logger.info(
            "Staff created",
            staff_id=user.id,
            email=mask_email(email),
            role=user.role,
            actor_id=actor.get("user_id") if actor else None,
        )
        return user
