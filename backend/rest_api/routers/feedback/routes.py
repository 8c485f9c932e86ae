"""
Feedback router.
Diners rate delivered orders; staff with VIEW_FEEDBACK read them.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from shared.config.constants import Limits
from shared.infrastructure.db import get_db
from shared.security.auth import current_user_context, optional_user_context
from shared.security.permissions import Permission, require_permission
from shared.utils.schemas import (
    FeedbackCreate,
    FeedbackListResponse,
    FeedbackResponse,
    FeedbackStats,
)
from rest_api.services.domain import FeedbackService


router = APIRouter(prefix="/api/feedback", tags=["feedback"])


@router.post("", response_model=FeedbackResponse, status_code=status.HTTP_201_CREATED)
def submit_feedback(
    body: FeedbackCreate,
    db: Session = Depends(get_db),
    ctx: dict[str, Any] | None = Depends(optional_user_context),
) -> FeedbackResponse:
    """One feedback per delivered order."""
    return FeedbackResponse(feedback=FeedbackService(db).create(body, ctx))


@router.get("", response_model=FeedbackListResponse)
def list_feedback(
    limit: int = Query(default=Limits.DEFAULT_PAGE_SIZE, ge=1, le=Limits.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(current_user_context),
) -> FeedbackListResponse:
    require_permission(ctx, Permission.VIEW_FEEDBACK)
    return FeedbackListResponse(feedback=FeedbackService(db).list_recent(limit))


@router.get("/stats", response_model=FeedbackStats)
def feedback_stats(
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(current_user_context),
) -> FeedbackStats:
    require_permission(ctx, Permission.VIEW_FEEDBACK)
    return FeedbackStats(**FeedbackService(db).stats())
