"""
HTTP exceptions raised by services and routers.

Every exception logs itself on construction with the structured logger, so
call sites only need to raise:

    raise NotFoundError("Order", order_id)
    raise ForbiddenError("manage the menu", role=ctx["role"])
    raise InvalidTransitionError("Order", "ready", "preparing", order_id=7)
"""

from typing import Any

from fastapi import HTTPException, status

from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """Base exception that logs its detail and context when created."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        **log_context: Any,
    ):
        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, **log_context)
        super().__init__(status_code=status_code, detail=detail, headers=headers)


# =============================================================================
# 401 / 403
# =============================================================================


class UnauthorizedError(AppException):
    """Missing or invalid credentials (401)."""

    def __init__(self, detail: str = "Not authenticated", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
            **log_context,
        )


class ForbiddenError(AppException):
    """Authenticated but not allowed (403)."""

    def __init__(self, action: str | None = None, **log_context: Any):
        detail = f"Not allowed to {action}" if action else "Access denied"
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            action=action,
            **log_context,
        )


# =============================================================================
# 404
# =============================================================================


class NotFoundError(AppException):
    """Entity not found (404)."""

    def __init__(self, entity: str, entity_id: int | str | None = None, **log_context: Any):
        if entity_id is not None:
            detail = f"{entity} {entity_id} not found"
        else:
            detail = f"{entity} not found"
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: int | None = None, **log_context: Any):
        super().__init__("Order", order_id, **log_context)


class MenuItemNotFoundError(NotFoundError):
    def __init__(self, item_id: int | None = None, **log_context: Any):
        super().__init__("Menu item", item_id, **log_context)


# =============================================================================
# 422
# =============================================================================


class ValidationError(AppException):
    """Semantically invalid input (422)."""

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
            **log_context,
        )


# =============================================================================
# 409
# =============================================================================


class ConflictError(AppException):
    """Request conflicts with the current state of the resource (409)."""

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            **log_context,
        )


class InvalidStateError(ConflictError):
    """Entity is in a state that does not allow the operation."""

    def __init__(self, entity: str, current_state: str, operation: str | None = None, **log_context: Any):
        if operation:
            detail = f"Cannot {operation}: {entity} is '{current_state}'"
        else:
            detail = f"{entity} is '{current_state}', operation not allowed"
        super().__init__(detail, entity=entity, current_state=current_state, **log_context)


class InvalidTransitionError(ConflictError):
    """Status change not present in the transition table."""

    def __init__(self, entity: str, from_status: str, to_status: str, **log_context: Any):
        detail = f"Invalid transition for {entity}: '{from_status}' -> '{to_status}'"
        super().__init__(
            detail,
            entity=entity,
            from_status=from_status,
            to_status=to_status,
            **log_context,
        )


class StaleVersionError(ConflictError):
    """Write based on an outdated version of the entity."""

    def __init__(self, entity: str, expected: int, actual: int, **log_context: Any):
        super().__init__(
            f"{entity} was modified (version {actual}, expected {expected})",
            entity=entity,
            expected_version=expected,
            actual_version=actual,
            **log_context,
        )


class DuplicateEntityError(ConflictError):
    def __init__(self, entity: str, identifier: str | None = None, **log_context: Any):
        detail = f"{entity} '{identifier}' already exists" if identifier else f"{entity} already exists"
        super().__init__(detail, entity=entity, identifier=identifier, **log_context)


# =============================================================================
# 500
# =============================================================================


class InternalError(AppException):
    def __init__(self, detail: str = "Internal server error", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            log_level="error",
            **log_context,
        )


class DatabaseError(InternalError):
    """A database operation failed and was rolled back."""

    def __init__(self, operation: str, **log_context: Any):
        super().__init__(
            f"Database error during {operation}. Please try again.",
            operation=operation,
            **log_context,
        )
