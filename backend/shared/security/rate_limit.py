"""
Rate limiting for public endpoints using slowapi.

    from shared.security.rate_limit import limiter

    @router.post("/login")
    @limiter.limit(LOGIN_RATE)
    def login(request: Request, ...):
        ...
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from shared.config.logging import get_logger
from shared.config.settings import settings

logger = get_logger(__name__)

limiter = Limiter(key_func=get_remote_address)

LOGIN_RATE = f"{settings.login_rate_limit}/{settings.login_rate_window} seconds"
ORDER_RATE = settings.order_rate_limit
SERVICE_REQUEST_RATE = settings.service_request_rate_limit


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """JSON 429 with the limit that was hit."""
    logger.warning(
        "Rate limit exceeded",
        path=request.url.path,
        client=get_remote_address(request),
        limit=str(exc.detail),
    )
    return JSONResponse(
        status_code=429,
        content={"detail": "Too many requests. Please try again later.", "limit": str(exc.detail)},
        headers={"Retry-After": "60"},
    )
