"""
Health check endpoint for the REST API.
Reports database and Redis connectivity.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shared.config.logging import api_logger as logger
from shared.infrastructure.db import get_db
from shared.infrastructure.events import ping_redis
from shared.utils.schemas import HealthResponse


router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health", response_model=HealthResponse)
def health_check(db: Session = Depends(get_db)):
    """
    ``status`` is "healthy" when the database answers. Redis only carries
    real-time events and carts, so its loss degrades the service without
    failing the check. Returns 503 when the database is down.
    """
    try:
        db.execute(text("SELECT 1"))
        database = "connected"
    except SQLAlchemyError as e:
        logger.error("Database health check failed", error=str(e))
        database = "disconnected"

    redis_state = "connected" if ping_redis() else "disconnected"

    if database != "connected":
        body = HealthResponse(status="unhealthy", database=database, redis=redis_state)
        return JSONResponse(status_code=503, content=body.model_dump(by_alias=True))

    status = "healthy" if redis_state == "connected" else "degraded"
    return HealthResponse(status=status, database=database, redis=redis_state)
