"""
Auth Domain Service.

Registration, login and the customer health profile.
"""

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from shared.config.constants import STAFF_ROLES, Roles
from shared.config.logging import auth_logger as logger, mask_email
from shared.infrastructure.db import safe_commit
from shared.security.auth import issue_user_token
from shared.security.password import hash_password, verify_password
from shared.utils.exceptions import (
    DuplicateEntityError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
)
from shared.utils.schemas import HealthProfileInput, RegisterRequest
from rest_api.models import User


def normalize_email(email: str) -> str:
    return email.strip().lower()


def apply_health_profile(user: User, profile: HealthProfileInput) -> None:
    user.allergies = [a.strip() for a in profile.allergies if a and a.strip()]
    user.dietary_plan = profile.dietary_plan
    user.health_goals = [g.strip() for g in profile.health_goals if g and g.strip()]
    user.health_profile_created = True


class AuthService:
    """Domain service for user authentication."""

    def __init__(self, db: Session):
        self._db = db

    def get_by_email(self, email: str) -> User | None:
        return self._db.scalar(select(User).where(User.email == normalize_email(email)))

    def get_user(self, user_id: int) -> User:
        user = self._db.scalar(
            select(User).where(User.id == user_id, User.is_active.is_(True))
        )
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    @staticmethod
    def issue_token(user: User) -> str:
        return issue_user_token(user.id, user.email, user.name, user.role)

    def register(self, data: RegisterRequest) -> tuple[User, str]:
        """
        Create a customer account and sign it in.

        Raises:
            DuplicateEntityError: the email is taken
        """
        email = normalize_email(data.email)
        if self.get_by_email(email) is not None:
            raise DuplicateEntityError("User", email)

        user = User(
            name=data.name.strip(),
            email=email,
            password=hash_password(data.password),
            phone=data.phone,
            role=Roles.CUSTOMER,
        )
        if data.health_profile is not None:
            apply_health_profile(user, data.health_profile)

        self._db.add(user)
        safe_commit(self._db, "registration")
        self._db.refresh(user)

        logger.info("User registered", user_id=user.id, email=mask_email(email))
        return user, self.issue_token(user)

    def authenticate(self, email: str, password: str) -> User:
        """
        Raises:
            UnauthorizedError: unknown email, wrong password or inactive account
        """
        user = self.get_by_email(email)
        if user is None or not verify_password(password, user.password):
            logger.warning("Login failed", email=mask_email(email))
            raise UnauthorizedError("Invalid email or password")
        if not user.is_active:
            logger.warning("Login for inactive account", user_id=user.id)
            raise UnauthorizedError("Account is disabled")
        return user

    def login(self, email: str, password: str) -> tuple[User, str]:
        user = self.authenticate(email, password)
        logger.info("User logged in", user_id=user.id, role=user.role)
        return user, self.issue_token(user)

    def admin_login(self, email: str, password: str) -> tuple[User, str]:
        """Login restricted to staff roles."""
        user = self.authenticate(email, password)
        if user.role not in STAFF_ROLES:
            raise ForbiddenError("access the staff console", user_id=user.id)
        logger.info("Staff logged in", user_id=user.id, role=user.role)
        return user, self.issue_token(user)

    def update_health_profile(self, ctx: dict[str, Any], profile: HealthProfileInput) -> User:
        user = self.get_user(ctx["user_id"])
        apply_health_profile(user, profile)
        safe_commit(self._db)
        self._db.refresh(user)
        logger.info(
            "Health profile updated",
            user_id=user.id,
            allergies=len(user.allergies),
            dietary_plan=user.dietary_plan,
        )
        return user
