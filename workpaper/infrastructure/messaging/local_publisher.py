"""In-process notification publisher used when Redis is disabled.

Writes straight to the local ConnectionManager, so only connections held
by this process receive the push.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from workpaper.api.websocket import ConnectionManager

logger = logging.getLogger(__name__)


class WebSocketNotificationPublisher:
    """Implements INotificationPublisher over the in-process ConnectionManager."""

    def __init__(self, manager: "ConnectionManager") -> None:
        self.manager = manager

    async def publish(self, user_id: str, event_name: str, payload: dict[str, Any]) -> bool:
        """Return True when at least one open connection received the message."""
        delivered = await self.manager.send_to_user(
            user_id, {"event": event_name, "payload": payload}
        )
        logger.debug("Pushed %s to %d connection(s) of user %s", event_name, delivered, user_id)
        return delivered > 0
