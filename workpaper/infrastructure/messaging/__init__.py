"""Messaging: real-time notification publishers (Redis pub/sub or in-process)."""

from workpaper.infrastructure.messaging.local_publisher import (
    WebSocketNotificationPublisher,
)
from workpaper.infrastructure.messaging.redis_pubsub import (
    RedisNotificationPublisher,
    run_notification_relay,
)

__all__ = [
    "RedisNotificationPublisher",
    "WebSocketNotificationPublisher",
    "run_notification_relay",
]
