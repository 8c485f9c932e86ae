"""
Publish events to their room channel with retry and circuit breaking.
"""

from __future__ import annotations

import asyncio

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from shared.config.logging import get_logger
from shared.config.settings import settings

from .channels import channel_for_room
from .circuit_breaker import calculate_retry_delay_with_jitter, get_event_circuit_breaker
from .event_schema import Event
from .event_types import MAX_EVENT_SIZE

logger = get_logger(__name__)


def _check_size(event_json: str, event_type: str) -> None:
    size = len(event_json.encode("utf-8"))
    if size > MAX_EVENT_SIZE:
        raise ValueError(f"Event {event_type} exceeds max size: {size} > {MAX_EVENT_SIZE} bytes")


async def publish_event(redis_client: aioredis.Redis, event: Event) -> int:
    """
    Publish ``event`` on its room's channel.

    Returns:
        Number of subscribers that received it; 0 when the circuit is open.

    Raises:
        ValueError: the serialized event is larger than MAX_EVENT_SIZE.
        redis.RedisError: every retry failed.
    """
    event_json = event.to_json()
    _check_size(event_json, event.type)
    channel = channel_for_room(event.room)

    breaker = get_event_circuit_breaker()
    if not breaker.can_execute():
        logger.warning("Event publish skipped, circuit open", channel=channel, event_type=event.type)
        return 0

    retries = max(1, settings.redis_publish_max_retries)
    last_error: Exception | None = None
    for attempt in range(retries):
        try:
            receivers = await redis_client.publish(channel, event_json)
            breaker.record_success()
            return receivers
        except (RedisError, OSError) as e:
            last_error = e
            if attempt < retries - 1:
                delay = calculate_retry_delay_with_jitter(attempt, settings.redis_publish_retry_delay)
                logger.warning(
                    "Redis publish failed, retrying",
                    channel=channel,
                    event_type=event.type,
                    attempt=attempt + 1,
                    delay_seconds=round(delay, 2),
                    error=str(e),
                )
                await asyncio.sleep(delay)

    breaker.record_failure()
    logger.error("Redis publish failed after all retries", channel=channel, event_type=event.type)
    raise last_error  # type: ignore[misc]
