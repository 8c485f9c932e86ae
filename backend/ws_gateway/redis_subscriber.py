"""
Redis pub/sub subscriber for the WebSocket gateway.

Pattern-subscribes to every room channel, validates the envelope and hands
``(room, event)`` to the dispatcher. Lost connections are retried with
jittered backoff until ``redis_max_reconnect_attempts`` is exhausted.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

from redis.exceptions import ConnectionError as RedisConnectionError, TimeoutError as RedisTimeoutError

from shared.config.logging import ws_logger as logger
from shared.config.settings import settings
from shared.infrastructure.events import (
    CHANNEL_PATTERN,
    Event,
    calculate_retry_delay_with_jitter,
    get_redis_pool,
    room_from_channel,
)

EventHandler = Callable[[str, Event], Awaitable[None]]


def _as_text(value: str | bytes | None) -> str | None:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def parse_message(msg: dict) -> tuple[str, Event] | None:
    """
    Turn a raw pub/sub message into ``(room, event)``.

    Returns None for subscription confirmations, channels outside the room
    prefix, malformed envelopes, and envelopes whose room disagrees with the
    channel they arrived on.
    """
    if msg.get("type") not in ("message", "pmessage"):
        return None

    channel = _as_text(msg.get("channel"))
    room = room_from_channel(channel or "")
    if room is None:
        logger.warning("Message on unknown channel", channel=channel)
        return None

    try:
        event = Event.from_json(msg["data"])
    except (ValueError, KeyError) as e:
        logger.warning("Invalid event envelope", channel=channel, error=str(e))
        return None

    if event.room != room:
        logger.warning("Event room does not match channel", channel=channel, room=event.room)
        return None
    return room, event


async def run_subscriber(on_event: EventHandler, on_subscribed: Callable[[], None] | None = None) -> None:
    """Listen until cancelled. Raises the Redis error if the pubsub drops."""
    redis_pool = await get_redis_pool()
    pubsub = redis_pool.pubsub()
    await pubsub.psubscribe(CHANNEL_PATTERN)
    logger.info("Redis subscriber started", pattern=CHANNEL_PATTERN)
    if on_subscribed is not None:
        on_subscribed()

    try:
        async for msg in pubsub.listen():
            if msg is None:
                continue
            parsed = parse_message(msg)
            if parsed is None:
                continue
            room, event = parsed
            try:
                await on_event(room, event)
            except Exception as e:
                logger.error("Error dispatching event", event_type=event.type, room=room, error=str(e), exc_info=True)
    except asyncio.CancelledError:
        logger.info("Redis subscriber cancelled")
        raise
    finally:
        try:
            await pubsub.punsubscribe(CHANNEL_PATTERN)
            await pubsub.aclose()
        except (RedisConnectionError, RedisTimeoutError, OSError) as e:
            logger.debug("Pubsub cleanup failed", error=str(e))


async def run_subscriber_forever(on_event: EventHandler) -> None:
    """Run the subscriber, reconnecting after connection errors."""
    attempt = 0

    def reset_attempts() -> None:
        # Only consecutive failed connects count against the limit
        nonlocal attempt
        attempt = 0

    while True:
        try:
            await run_subscriber(on_event, on_subscribed=reset_attempts)
            attempt = 0
            logger.warning("Redis subscriber stream ended, resubscribing")
            await asyncio.sleep(calculate_retry_delay_with_jitter(0))
        except (RedisConnectionError, RedisTimeoutError, OSError) as e:
            attempt += 1
            if attempt > settings.redis_max_reconnect_attempts:
                logger.error("Redis subscriber giving up", attempts=attempt - 1, error=str(e))
                raise
            delay = calculate_retry_delay_with_jitter(attempt)
            logger.warning(
                "Redis subscriber disconnected, retrying",
                attempt=attempt,
                delay=round(delay, 2),
                error=str(e),
            )
            await asyncio.sleep(delay)
