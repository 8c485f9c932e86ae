"""
Reporting endpoints: dashboard, analytics, service metrics, staff performance.
"""

from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.security.permissions import Permission
from shared.utils.schemas import (
    AnalyticsResponse,
    DashboardResponse,
    PeriodLiteral,
    ServiceMetricsResponse,
    StaffPerformanceResponse,
)
from rest_api.services.domain import ReportingService

from ._base import requires


router = APIRouter(tags=["admin-reports"])

analytics_access = requires(Permission.VIEW_ANALYTICS)


@router.get("/dashboard", response_model=DashboardResponse)
def dashboard(
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(analytics_access),
) -> DashboardResponse:
    """Today's figures (UTC day) plus live occupancy."""
    return DashboardResponse(today_stats=ReportingService(db).dashboard())


@router.get("/analytics", response_model=AnalyticsResponse)
def analytics(
    period: PeriodLiteral = Query(default="week"),
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(analytics_access),
) -> AnalyticsResponse:
    return AnalyticsResponse(**ReportingService(db).analytics(period))


@router.get("/service-metrics", response_model=ServiceMetricsResponse)
def service_metrics(
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(analytics_access),
) -> ServiceMetricsResponse:
    return ServiceMetricsResponse(metrics=ReportingService(db).service_metrics())


@router.get("/staff-performance", response_model=StaffPerformanceResponse)
def staff_performance(
    db: Session = Depends(get_db),
    ctx: dict[str, Any] = Depends(analytics_access),
) -> StaffPerformanceResponse:
    return StaffPerformanceResponse(performance=ReportingService(db).staff_performance())
