"""
Menu routers - /api/menu/*
"""

from .routes import router

__all__ = ["router"]
