"""
Feedback routers - /api/feedback/*
"""

from .routes import router

__all__ = ["router"]
