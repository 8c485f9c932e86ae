"""
Admin API router - combines the admin sub-routers.

- reports: dashboard, analytics, service metrics, staff performance
- staff: staff accounts

All routes are prefixed with /api/admin
"""

from fastapi import APIRouter

from .reports import router as reports_router
from .staff import router as staff_router


router = APIRouter(prefix="/api/admin")

router.include_router(reports_router)
router.include_router(staff_router)


__all__ = ["router"]
