"""
Cart routers - /api/cart/*
"""

from .routes import router

__all__ = ["router"]
