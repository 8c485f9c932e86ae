"""
Client session persistence.

A ``ClientSession`` holds what a diner's browser used to keep in global
local storage: the selected table and the pending cart. It is loaded and
saved explicitly through a ``KeyValueStore`` keyed by the ``X-Session-ID``
header the client sends.

    store = get_session_store()
    session = store.load(session_id)
    session.table_number = 7
    store.save(session)
"""

from __future__ import annotations

import re
import threading
import time
from functools import lru_cache
from typing import Protocol

from pydantic import BaseModel, Field
from redis.exceptions import RedisError

from shared.config.logging import get_logger
from shared.config.settings import settings
from shared.utils.exceptions import InternalError, ValidationError
from shared.utils.schemas import CartLine

logger = get_logger(__name__)

SESSION_KEY_PREFIX = "session:client:"
_SESSION_ID_RE = re.compile(r"^[A-Za-z0-9_-]{8,128}$")


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str, ttl_seconds: int) -> None: ...

    def delete(self, key: str) -> None: ...


class RedisKeyValueStore:
    """KeyValueStore on the shared sync Redis pool."""

    def __init__(self, client=None):
        if client is None:
            from shared.infrastructure.events.redis_pool import get_redis_sync_client

            client = get_redis_sync_client()
        self._client = client

    def get(self, key: str) -> str | None:
        return self._client.get(key)

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._client.set(key, value, ex=ttl_seconds)

    def delete(self, key: str) -> None:
        self._client.delete(key)


class InMemoryKeyValueStore:
    """Process-local KeyValueStore with TTL; for tests and single-process dev."""

    def __init__(self):
        self._data: dict[str, tuple[str, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at <= time.monotonic():
                del self._data[key]
                return None
            return value

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._lock:
            self._data[key] = (value, time.monotonic() + ttl_seconds)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()


class ClientSession(BaseModel):
    """Selected table plus pending cart lines for one client."""

    session_id: str
    table_number: int | None = None
    items: list[CartLine] = Field(default_factory=list)


class ClientSessionStore:
    """Load/save lifecycle for ClientSession over a KeyValueStore."""

    def __init__(self, kv: KeyValueStore, ttl_seconds: int | None = None):
        self._kv = kv
        self._ttl = ttl_seconds or settings.cart_ttl_seconds

    @staticmethod
    def validate_session_id(session_id: str | None) -> str:
        if not session_id or not _SESSION_ID_RE.match(session_id):
            raise ValidationError(
                "X-Session-ID header must be 8-128 characters of letters, digits, '-' or '_'"
            )
        return session_id

    @staticmethod
    def _key(session_id: str) -> str:
        return f"{SESSION_KEY_PREFIX}{session_id}"

    def load(self, session_id: str) -> ClientSession:
        """Stored session, or a fresh empty one."""
        try:
            raw = self._kv.get(self._key(session_id))
        except RedisError as e:
            raise InternalError("Session store unavailable", error=str(e))
        if raw is None:
            return ClientSession(session_id=session_id)
        try:
            return ClientSession.model_validate_json(raw)
        except ValueError:
            logger.warning("Discarding unreadable client session", session_id=session_id)
            return ClientSession(session_id=session_id)

    def save(self, session: ClientSession) -> None:
        try:
            self._kv.set(self._key(session.session_id), session.model_dump_json(), self._ttl)
        except RedisError as e:
            raise InternalError("Session store unavailable", error=str(e))

    def clear(self, session_id: str) -> None:
        try:
            self._kv.delete(self._key(session_id))
        except RedisError as e:
            raise InternalError("Session store unavailable", error=str(e))


@lru_cache
def get_session_store() -> ClientSessionStore:
    """FastAPI dependency: the configured store (overridden in tests)."""
    if settings.session_store_backend == "memory":
        return ClientSessionStore(InMemoryKeyValueStore())
    return ClientSessionStore(RedisKeyValueStore())
