"""
Recommendation routers - /api/recommendations/*
"""

from .routes import router

__all__ = ["router"]
