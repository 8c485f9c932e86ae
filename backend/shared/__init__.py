"""
Shared module for common utilities across REST API and WS Gateway.

STRUCTURE:
- shared.security: Authentication and authorization
  - auth.py: JWT issue/verify, current_user_context, verify_ws_token
  - permissions.py: Role capabilities, require_permission
  - password.py: Bcrypt hashing
  - rate_limit.py: slowapi limiter

- shared.infrastructure: Database, messaging and sessions
  - db.py: SQLAlchemy sessions, safe_commit() (raises DatabaseError)
  - events/: Redis pub/sub rooms, event envelope, publishing
  - session_store.py: Per-device cart sessions (Redis or memory)
  - correlation.py: X-Request-ID propagation

- shared.config: Configuration
  - settings.py: Environment config (pydantic-settings)
  - logging.py: Structured logging
  - constants.py: Roles, OrderStatus, transitions, limits

- shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging
  - schemas.py: Pydantic request/response schemas

IMPORT EXAMPLES:
    from shared.security.auth import verify_jwt, current_user_context
    from shared.infrastructure.db import get_db, safe_commit
    from shared.config.settings import settings
    from shared.config.constants import Roles, OrderStatus
    from shared.utils.exceptions import NotFoundError, ForbiddenError
"""
