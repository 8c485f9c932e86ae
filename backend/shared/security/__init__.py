"""
Security module: JWT authentication, capabilities, password hashing, rate limiting.
"""

from shared.security.auth import (
    current_user_context,
    get_bearer_token,
    issue_user_token,
    optional_user_context,
    sign_jwt,
    verify_jwt,
    verify_ws_token,
)
from shared.security.password import hash_password, verify_password
from shared.security.permissions import (
    Permission,
    has_capability,
    permissions_for,
    require_permission,
)
from shared.security.rate_limit import limiter, rate_limit_exceeded_handler

__all__ = [
    # auth
    "sign_jwt",
    "issue_user_token",
    "verify_jwt",
    "get_bearer_token",
    "current_user_context",
    "optional_user_context",
    "verify_ws_token",
    # permissions
    "Permission",
    "has_capability",
    "permissions_for",
    "require_permission",
    # password
    "hash_password",
    "verify_password",
    # rate_limit
    "limiter",
    "rate_limit_exceeded_handler",
]
