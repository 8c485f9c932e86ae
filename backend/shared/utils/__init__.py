"""
Utilities module: exceptions and shared schemas.
"""

from shared.utils.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)

__all__ = [
    "NotFoundError",
    "ForbiddenError",
    "ValidationError",
    "ConflictError",
    "InvalidStateError",
    "InvalidTransitionError",
]
