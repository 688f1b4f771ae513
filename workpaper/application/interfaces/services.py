"""Service interfaces (ports) for the application layer.

Protocols define contracts for application services (DIP).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from workpaper.domain.entities import NotificationEntity
    from workpaper.domain.notifications import NotificationEvent


# Real-time publisher interface
class INotificationPublisher(Protocol):
    """Protocol for the per-user real-time channel (lossy, fire-and-forget)."""

    async def publish(self, user_id: str, event_name: str, payload: dict[str, Any]) -> bool:
        """Publish payload to the user's channel. Return False if not delivered; never raise."""


# Notification dispatcher interface
class INotificationDispatcher(Protocol):
    """Protocol for turning a notification event into rows and publishes."""

    async def dispatch(
        self, tenant_id: str, event: NotificationEvent
    ) -> list[NotificationEntity]:
        """Persist one notification per target user, then publish each."""
