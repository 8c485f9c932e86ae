"""
Authentication routers - /api/auth/* and /api/health-profile
"""

from .routes import health_profile_router, router

__all__ = ["router", "health_profile_router"]
