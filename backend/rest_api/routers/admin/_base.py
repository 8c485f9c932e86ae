"""
Shared dependencies for admin routers.
"""

from typing import Any, Callable

from fastapi import Depends

from shared.security.auth import current_user_context
from shared.security.permissions import Permission, require_permission


def requires(permission: Permission) -> Callable[..., dict[str, Any]]:
    """
    Dependency factory: resolves the caller and checks ``permission``.

        @router.get("/dashboard")
        def dashboard(ctx: dict = Depends(requires(Permission.VIEW_ANALYTICS))):
            ...
    """

    def dependency(ctx: dict[str, Any] = Depends(current_user_context)) -> dict[str, Any]:
        require_permission(ctx, permission)
        return ctx

    return dependency
