"""
Recommendations router.
"""

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.security.auth import current_user_context
from shared.utils.schemas import RecommendationsResponse
from rest_api.services.domain import RecommendationService


router = APIRouter(prefix="/api/recommendations", tags=["recommendations"])


@router.get("", response_model=RecommendationsResponse)
def personalized(
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(current_user_context),
) -> RecommendationsResponse:
    """Dishes matching the caller's health goals and dietary plan, allergens excluded."""
    return RecommendationsResponse(recommendations=RecommendationService(db).personalized(ctx))


@router.get("/popular", response_model=RecommendationsResponse)
def popular(db: Session = Depends(get_db)) -> RecommendationsResponse:
    return RecommendationsResponse(recommendations=RecommendationService(db).popular())
