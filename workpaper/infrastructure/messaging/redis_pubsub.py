"""Redis Pub/Sub for real-time notification pushes.

Each persisted notification is published on the recipient's channel
user.{id}. The relay task started by the lifespan pattern-subscribes to
user.* and forwards every message to that user's WebSocket connections.
Delivery is best effort: a missed push is still visible through polling.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Callable

import redis.asyncio as redis

from workpaper.core.config import get_settings

logger = logging.getLogger(__name__)


class _RedisPubSubBase:
    """Shared Redis connection and channel naming for notification pub/sub."""

    CHANNEL_PREFIX = "user"

    def __init__(self, redis_client: redis.Redis | None = None) -> None:
        """Pass redis_client to inject a client (tests)."""
        self.redis = redis_client
        self.settings = get_settings()
        self._connected = redis_client is not None

    async def connect(self) -> None:
        """Open the Redis connection. A failure leaves the instance unavailable."""
        if self._connected:
            return
        if self.redis is None:
            try:
                self.redis = redis.Redis(
                    host=self.settings.redis_host,
                    port=self.settings.redis_port,
                    db=self.settings.redis_db,
                    password=(
                        self.settings.redis_password.get_secret_value()
                        if self.settings.redis_password
                        else None
                    ),
                    decode_responses=True,
                    socket_connect_timeout=5,
                )
                await self.redis.ping()
                self._connected = True
                logger.info("Redis pub/sub connected")
            except (redis.ConnectionError, redis.TimeoutError) as e:
                logger.warning("Redis pub/sub connection failed: %s", e)
                self._connected = False
                self.redis = None

    async def disconnect(self) -> None:
        if self.redis:
            await self.redis.aclose()
            self._connected = False
            logger.info("Redis pub/sub disconnected")

    def is_available(self) -> bool:
        return self._connected and self.redis is not None

    @classmethod
    def channel_for(cls, user_id: str) -> str:
        return f"{cls.CHANNEL_PREFIX}.{user_id}"

    @classmethod
    def user_from_channel(cls, channel: str) -> str | None:
        prefix = f"{cls.CHANNEL_PREFIX}."
        if not channel.startswith(prefix):
            return None
        return channel[len(prefix):] or None


class RedisNotificationPublisher(_RedisPubSubBase):
    """Publishes notification events to user.{id} (implements INotificationPublisher)."""

    async def publish(self, user_id: str, event_name: str, payload: dict[str, Any]) -> bool:
        """Publish {"event": event_name, "payload": payload}.

        Returns:
            True if handed to Redis, False if Redis is unavailable or the publish failed.
        """
        if not self.is_available() or self.redis is None:
            logger.debug("Redis not available, skipping publish")
            return False
        channel = self.channel_for(user_id)
        try:
            message = json.dumps({"event": event_name, "payload": payload}, default=str)
            await self.redis.publish(channel, message)
            logger.debug("Published %s to %s", event_name, channel)
        except Exception:
            logger.exception("Failed to publish notification to %s", channel)
            return False
        else:
            return True


RELAY_RETRY_SECONDS = 1.0
RELAY_RETRY_MAX_SECONDS = 30.0


async def run_notification_relay(
    app: Any,
    *,
    subscriber_factory: Callable[[], _RedisPubSubBase] = _RedisPubSubBase,
    retry_seconds: float = RELAY_RETRY_SECONDS,
    max_retry_seconds: float = RELAY_RETRY_MAX_SECONDS,
) -> None:
    """Forward messages from Redis user.* channels to the user's WebSocket connections.

    Started as a background task by the lifespan when Redis is enabled;
    cancelling the task stops the loop. A lost connection is re-established
    with exponential backoff, reset once a subscription succeeds.
    """
    delay = retry_seconds
    while True:
        subscribed = asyncio.Event()
        try:
            await _relay_once(app, subscriber_factory(), subscribed)
        except asyncio.CancelledError:
            logger.info("Notification relay task cancelled")
            raise
        except Exception:
            logger.exception("Notification relay error")
        if subscribed.is_set():
            delay = retry_seconds
        logger.warning("Notification relay reconnecting in %.1fs", delay)
        await asyncio.sleep(delay)
        delay = min(delay * 2, max_retry_seconds)


async def _relay_once(
    app: Any, subscriber: _RedisPubSubBase, subscribed: asyncio.Event
) -> None:
    """One subscribe/listen session; returns or raises when the connection ends."""
    await subscriber.connect()
    if not subscriber.is_available() or subscriber.redis is None:
        logger.warning("Redis not available for notification relay")
        return
    pubsub = subscriber.redis.pubsub()
    pattern = f"{_RedisPubSubBase.CHANNEL_PREFIX}.*"
    try:
        await pubsub.psubscribe(pattern)
        subscribed.set()
        logger.info("Subscribed to %s for WebSocket relay", pattern)
        async for message in pubsub.listen():
            if message["type"] != "pmessage":
                continue
            channel = message.get("channel")
            channel_str = channel.decode() if isinstance(channel, bytes) else (channel or "")
            user_id = _RedisPubSubBase.user_from_channel(channel_str)
            if user_id is None:
                continue
            try:
                data = json.loads(message["data"])
            except (json.JSONDecodeError, KeyError, TypeError):
                logger.exception("Failed to parse notification message on %s", channel_str)
                continue
            manager = getattr(app.state, "ws_manager", None)
            if manager is not None:
                await manager.send_to_user(user_id, data)
    finally:
        await pubsub.punsubscribe()
        await pubsub.aclose()
        await subscriber.disconnect()
