"""
Circuit breaker and retry backoff for event publishing.

When Redis is down every publish would otherwise wait for its socket
timeout and retries; the breaker fails fast instead and probes again after
a recovery window.
"""

from __future__ import annotations

import random
import threading
import time
from enum import Enum

from shared.config.logging import get_logger
from shared.config.settings import settings

logger = get_logger(__name__)


class CircuitState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class EventCircuitBreaker:
    """
    CLOSED: publishes go through; consecutive failures are counted.
    OPEN: publishes are rejected until ``recovery_timeout`` has elapsed.
    HALF_OPEN: up to ``half_open_max_calls`` probes; one success closes the
    circuit, one failure reopens it.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: float = 30.0,
        half_open_max_calls: int = 3,
    ):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.half_open_max_calls = half_open_max_calls

        self._state = CircuitState.CLOSED
        self._failures = 0
        self._opened_at = 0.0
        self._probes = 0
        self._rejected = 0
        self._lock = threading.Lock()

    @property
    def state(self) -> CircuitState:
        return self._state

    def can_execute(self) -> bool:
        with self._lock:
            if self._state is CircuitState.OPEN:
                if time.monotonic() - self._opened_at < self.recovery_timeout:
                    self._rejected += 1
                    return False
                self._state = CircuitState.HALF_OPEN
                self._probes = 0
                logger.info("Event circuit breaker half-open, probing Redis")

            if self._state is CircuitState.HALF_OPEN:
                if self._probes >= self.half_open_max_calls:
                    self._rejected += 1
                    return False
                self._probes += 1

            return True

    def record_success(self) -> None:
        with self._lock:
            if self._state is CircuitState.HALF_OPEN:
                logger.info("Event circuit breaker closed")
            self._state = CircuitState.CLOSED
            self._failures = 0

    def record_failure(self) -> None:
        with self._lock:
            self._failures += 1
            reopen = self._state is CircuitState.HALF_OPEN
            if reopen or self._failures >= self.failure_threshold:
                self._state = CircuitState.OPEN
                self._opened_at = time.monotonic()
                logger.error(
                    "Event circuit breaker open",
                    failures=self._failures,
                    threshold=self.failure_threshold,
                )

    def reset(self) -> None:
        with self._lock:
            self._state = CircuitState.CLOSED
            self._failures = 0
            self._probes = 0

    def get_stats(self) -> dict:
        with self._lock:
            return {
                "state": self._state.value,
                "failure_count": self._failures,
                "rejected_count": self._rejected,
            }


_event_circuit_breaker: EventCircuitBreaker | None = None
_circuit_breaker_lock = threading.Lock()


def get_event_circuit_breaker() -> EventCircuitBreaker:
    global _event_circuit_breaker
    if _event_circuit_breaker is None:
        with _circuit_breaker_lock:
            if _event_circuit_breaker is None:
                _event_circuit_breaker = EventCircuitBreaker(
                    failure_threshold=settings.redis_publish_max_retries + 2,
                )
    return _event_circuit_breaker


def calculate_retry_delay_with_jitter(attempt: int, base_delay: float = 0.5, max_delay: float = 10.0) -> float:
    """Exponential backoff (base * 2^attempt, capped) with uniform jitter above ``base_delay``."""
    ceiling = min(base_delay * (2 ** attempt), max_delay)
    return random.uniform(base_delay, max(ceiling, base_delay))
