"""
Authentication router.
Handles registration, login, the current user and the health profile.
"""

from typing import Any

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.security.auth import current_user_context
from shared.security.permissions import Permission, require_permission
from shared.security.rate_limit import LOGIN_RATE, limiter
from shared.utils.schemas import (
    AuthResponse,
    HealthProfileInput,
    LoginRequest,
    RegisterRequest,
    UserResponse,
)
from rest_api.services.domain import AuthService


router = APIRouter(prefix="/api/auth", tags=["auth"])
health_profile_router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(LOGIN_RATE)
def register(request: Request, body: RegisterRequest, db: Session = Depends(get_db)) -> AuthResponse:
    """Create a customer account, optionally with a health profile, and sign in."""
    user, token = AuthService(db).register(body)
    return AuthResponse(user=user, token=token)


@router.post("/login", response_model=AuthResponse)
@limiter.limit(LOGIN_RATE)
def login(request: Request, body: LoginRequest, db: Session = Depends(get_db)) -> AuthResponse:
    """Sign in any active user."""
    user, token = AuthService(db).login(body.email, body.password)
    return AuthResponse(user=user, token=token)


@router.post("/admin/login", response_model=AuthResponse)
@limiter.limit(LOGIN_RATE)
def admin_login(request: Request, body: LoginRequest, db: Session = Depends(get_db)) -> AuthResponse:
    """
    Sign in to the staff console.

    Customers get 403 even with correct credentials.
    """
    user, token = AuthService(db).admin_login(body.email, body.password)
    return AuthResponse(user=user, token=token)


@router.get("/me", response_model=UserResponse)
def me(
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(current_user_context),
) -> UserResponse:
    return UserResponse(user=AuthService(db).get_user(ctx["user_id"]))


@health_profile_router.put("/health-profile", response_model=UserResponse)
def update_health_profile(
    body: HealthProfileInput,
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(current_user_context),
) -> UserResponse:
    """Replace the caller's allergies, dietary plan and health goals."""
    require_permission(ctx, Permission.MANAGE_HEALTH_PROFILE)
    return UserResponse(user=AuthService(db).update_health_profile(ctx, body))
