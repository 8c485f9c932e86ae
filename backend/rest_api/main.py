"""
REST API main application.
Entry point for the FastAPI REST server.
"""

from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded

from shared.config.settings import settings
from shared.security.rate_limit import limiter, rate_limit_exceeded_handler
from rest_api.core.cors import configure_cors
from rest_api.core.lifespan import lifespan
from rest_api.core.middlewares import register_middlewares
from rest_api.routers.admin import router as admin_router
from rest_api.routers.auth import health_profile_router, router as auth_router
from rest_api.routers.cart import router as cart_router
from rest_api.routers.feedback import router as feedback_router
from rest_api.routers.menu import router as menu_router
from rest_api.routers.orders import router as orders_router
from rest_api.routers.public import health_router
from rest_api.routers.recommendations import router as recommendations_router
from rest_api.routers.tables import router as tables_router


app = FastAPI(
    title="VibeDine REST API",
    description="Restaurant ordering, kitchen queue and back office API",
    version="0.1.0",
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

register_middlewares(app)
configure_cors(app)


# =============================================================================
# Include Routers
# =============================================================================

app.include_router(health_router)
app.include_router(auth_router)
app.include_router(health_profile_router)
app.include_router(menu_router)
app.include_router(cart_router)
app.include_router(orders_router)
app.include_router(feedback_router)
app.include_router(admin_router)
app.include_router(tables_router)
app.include_router(recommendations_router)


# =============================================================================
# Development entry point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "rest_api.main:app",
        host="0.0.0.0",
        port=settings.rest_api_port,
        reload=settings.debug,
    )
