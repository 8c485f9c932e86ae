"""
Redis connection pools.

The async pool serves event publishing and the gateway subscriber; the sync
pool serves request handlers running in the threadpool (client session
store, health checks).
"""

from __future__ import annotations

import asyncio
import threading

import redis
import redis.asyncio as aioredis

from shared.config.logging import get_logger
from shared.config.settings import REDIS_URL, settings

logger = get_logger(__name__)


# =============================================================================
# Async pool
# =============================================================================

_redis_pool: aioredis.Redis | None = None
_redis_pool_lock: asyncio.Lock | None = None
_pool_lock_init = threading.Lock()


def _get_pool_lock() -> asyncio.Lock:
    global _redis_pool_lock
    if _redis_pool_lock is None:
        with _pool_lock_init:
            if _redis_pool_lock is None:
                _redis_pool_lock = asyncio.Lock()
    return _redis_pool_lock


async def get_redis_pool() -> aioredis.Redis:
    """Get or lazily create the shared async client."""
    global _redis_pool

    if _redis_pool is not None:
        return _redis_pool

    async with _get_pool_lock():
        if _redis_pool is None:
            _redis_pool = aioredis.from_url(
                REDIS_URL,
                max_connections=settings.redis_pool_max_connections,
                decode_responses=True,
                socket_connect_timeout=settings.redis_socket_timeout,
                socket_timeout=settings.redis_socket_timeout,
                health_check_interval=30,
            )
            logger.info(
                "Redis async pool initialized",
                max_connections=settings.redis_pool_max_connections,
            )
    return _redis_pool


# Routers publish through this name
get_redis_client = get_redis_pool


# =============================================================================
# Sync pool
# =============================================================================

_redis_sync_pool: redis.ConnectionPool | None = None
_sync_pool_lock = threading.Lock()


def get_redis_sync_client() -> redis.Redis:
    """A sync client backed by the shared connection pool."""
    global _redis_sync_pool
    if _redis_sync_pool is None:
        with _sync_pool_lock:
            if _redis_sync_pool is None:
                _redis_sync_pool = redis.ConnectionPool.from_url(
                    REDIS_URL,
                    max_connections=settings.redis_pool_max_connections,
                    decode_responses=True,
                    socket_connect_timeout=settings.redis_socket_timeout,
                    socket_timeout=settings.redis_socket_timeout,
                    health_check_interval=30,
                )
                logger.info("Redis sync pool initialized")
    return redis.Redis(connection_pool=_redis_sync_pool)


def ping_redis() -> bool:
    """True if Redis answers a PING through the sync pool."""
    try:
        return bool(get_redis_sync_client().ping())
    except redis.RedisError as e:
        logger.warning("Redis ping failed", error=str(e))
        return False


# =============================================================================
# Shutdown
# =============================================================================


async def close_redis_pool() -> None:
    """Close both pools. Called from the application lifespan."""
    global _redis_pool, _redis_pool_lock, _redis_sync_pool

    if _redis_pool is not None:
        await _redis_pool.aclose()
        _redis_pool = None
        logger.info("Redis async pool closed")
    _redis_pool_lock = None

    with _sync_pool_lock:
        if _redis_sync_pool is not None:
            _redis_sync_pool.disconnect()
            _redis_sync_pool = None
            logger.info("Redis sync pool closed")
