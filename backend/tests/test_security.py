"""
Tests for password hashing, JWT handling and role capabilities.
"""

import jwt
import pytest

from shared.config.constants import Roles
from shared.config.settings import JWT_AUDIENCE, JWT_ISSUER, JWT_SECRET
from shared.security.auth import (
    get_bearer_token,
    issue_user_token,
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
from shared.utils.exceptions import ForbiddenError, UnauthorizedError


class TestPasswordHashing:
    def test_hash_password_returns_bcrypt_hash(self):
        assert hash_password("mypassword", rounds=4).startswith("$2b$")

    def test_verify_password_correct(self):
        hashed = hash_password("mypassword", rounds=4)
        assert verify_password("mypassword", hashed) is True

    def test_verify_password_incorrect(self):
        hashed = hash_password("mypassword", rounds=4)
        assert verify_password("wrongpassword", hashed) is False

    def test_plain_text_never_matches(self):
        assert verify_password("plaintext", "plaintext") is False


class TestTokens:
    def test_round_trip(self):
        token = issue_user_token(7, "a@test.com", "A", Roles.MANAGER)
        claims = verify_jwt(token)
        assert claims["sub"] == "7"
        assert claims["role"] == Roles.MANAGER

    def test_foreign_signature_rejected(self):
        token = jwt.encode(
            {"sub": "7", "role": Roles.ADMIN, "type": "access", "iss": JWT_ISSUER, "aud": JWT_AUDIENCE},
            "not-the-server-secret-at-all-0000",
            algorithm="HS256",
        )
        with pytest.raises(UnauthorizedError):
            verify_jwt(token)

    def test_expired_token_rejected(self):
        token = jwt.encode(
            {"sub": "7", "role": Roles.ADMIN, "type": "access", "iss": JWT_ISSUER, "aud": JWT_AUDIENCE, "exp": 1},
            JWT_SECRET,
            algorithm="HS256",
        )
        with pytest.raises(UnauthorizedError, match="expired"):
            verify_jwt(token)

    def test_unknown_role_rejected(self):
        token = jwt.encode(
            {"sub": "1", "role": "superuser", "type": "access", "iss": JWT_ISSUER, "aud": JWT_AUDIENCE},
            JWT_SECRET,
            algorithm="HS256",
        )
        with pytest.raises(UnauthorizedError):
            verify_jwt(token)

    def test_bearer_header_parsing(self):
        assert get_bearer_token("Bearer abc") == "abc"
        with pytest.raises(UnauthorizedError):
            get_bearer_token("Token abc")
        with pytest.raises(UnauthorizedError):
            get_bearer_token(None)

    def test_ws_token_optional(self):
        assert verify_ws_token(None) is None
        ctx = verify_ws_token(issue_user_token(3, "k@test.com", "K", Roles.KITCHEN_STAFF))
        assert ctx == {"user_id": 3, "email": "k@test.com", "name": "K", "role": Roles.KITCHEN_STAFF}


class TestPermissions:
    def test_customer_capabilities(self):
        assert has_capability(Roles.CUSTOMER, Permission.PLACE_ORDER)
        assert not has_capability(Roles.CUSTOMER, Permission.VIEW_KITCHEN_QUEUE)
        assert not has_capability(Roles.CUSTOMER, Permission.JOIN_KITCHEN_ROOM)

    def test_kitchen_cannot_manage_menu(self):
        assert has_capability(Roles.KITCHEN_STAFF, Permission.SET_ORDER_PRIORITY)
        assert not has_capability(Roles.KITCHEN_STAFF, Permission.MANAGE_MENU)
        assert not has_capability(Roles.KITCHEN_STAFF, Permission.JOIN_ADMIN_ROOM)

    def test_manager_everything_but_staff(self):
        assert has_capability(Roles.MANAGER, Permission.VIEW_ANALYTICS)
        assert not has_capability(Roles.MANAGER, Permission.MANAGE_STAFF)

    def test_admin_holds_all(self):
        assert permissions_for(Roles.ADMIN) == frozenset(Permission)

    def test_unknown_or_missing_role_has_nothing(self):
        assert permissions_for(None) == frozenset()
        assert permissions_for("guest") == frozenset()

    def test_require_permission(self):
        require_permission({"user_id": 1, "role": Roles.ADMIN}, Permission.MANAGE_STAFF)
        with pytest.raises(UnauthorizedError):
            require_permission(None, Permission.PLACE_ORDER)
        with pytest.raises(ForbiddenError):
            require_permission({"user_id": 1, "role": Roles.CUSTOMER}, Permission.MANAGE_MENU)
