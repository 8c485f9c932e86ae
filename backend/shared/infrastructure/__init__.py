"""
Infrastructure module: database sessions, Redis events, client session store.
"""

from shared.infrastructure.db import (
    SessionLocal,
    engine,
    get_db,
    safe_commit,
)

__all__ = [
    "engine",
    "SessionLocal",
    "get_db",
    "safe_commit",
]
