"""Notification dispatcher: persisted rows plus best-effort real-time publish.

The persisted notification is the polling-safe consumer; the publish to
user.{id} is the push-only, lossy consumer. A publish failure is logged and
never retried and never affects the persisted rows.
"""

from __future__ import annotations

import logging
from typing import Any

from workpaper.application.interfaces.repositories import INotificationRepository
from workpaper.application.interfaces.services import (
    INotificationDispatcher,
    INotificationPublisher,
)
from workpaper.domain.entities import NotificationEntity
from workpaper.domain.notifications import NotificationEvent
from workpaper.shared.telemetry import get_tracer

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)


def to_payload(notification: NotificationEntity) -> dict[str, Any]:
    """Real-time payload for one persisted notification."""
    return {
        "id": notification.id,
        "title": notification.title,
        "message": notification.message,
        "url": notification.url,
        "type": notification.type.value,
        "created_at": notification.created_at.isoformat(),
        "data": notification.data,
    }


async def dispatch_best_effort(
    dispatcher: INotificationDispatcher,
    tenant_id: str,
    *events: NotificationEvent,
) -> None:
    """Dispatch events after a committed-to transition without failing it.

    Programming errors are re-raised; runtime failures (DB, network) are
    logged and the remaining events are still attempted.
    """
    for event in events:
        try:
            await dispatcher.dispatch(tenant_id, event)
        except (AssertionError, AttributeError, IndexError, KeyError, NameError, TypeError):
            raise
        except Exception:
            logger.exception(
                "Notification dispatch failed for task %s (type: %s)",
                event.task.task_id,
                event.type.value,
            )


class NotificationDispatcher:
    """Implements INotificationDispatcher."""

    def __init__(
        self,
        notification_repo: INotificationRepository,
        publisher: INotificationPublisher | None = None,
    ) -> None:
        self.notification_repo = notification_repo
        self.publisher = publisher

    async def dispatch(
        self, tenant_id: str, event: NotificationEvent
    ) -> list[NotificationEntity]:
        """Insert one unread row per target user, then publish each row.

        Target ids are deduplicated keeping first-seen order. Returns the
        persisted rows (empty when the event has no targets).
        """
        user_ids = list(dict.fromkeys(u for u in event.target_user_ids if u))
        if not user_ids:
            return []
        with tracer.start_as_current_span("notification.dispatch") as span:
            span.set_attribute("notification.type", event.type.value)
            span.set_attribute("notification.recipients", len(user_ids))
            rows = await self.notification_repo.add_for_users(
                tenant_id,
                user_ids,
                type=event.type,
                title=event.title,
                message=event.message,
                url=event.url,
                task_id=event.task.task_id,
                project_id=event.task.project_id,
                data=event.data(),
            )
            for row in rows:
                await self._publish(row, event.event_name)
        logger.info(
            "Dispatched %s notification to %d user(s) for task %s",
            event.type.value,
            len(rows),
            event.task.task_id,
        )
        return rows

    async def _publish(self, row: NotificationEntity, event_name: str) -> None:
        if self.publisher is None:
            return
        try:
            delivered = await self.publisher.publish(
                row.user_id, event_name, to_payload(row)
            )
        except Exception:
            logger.exception(
                "Real-time publish failed for notification %s (user %s)",
                row.id,
                row.user_id,
            )
            return
        if not delivered:
            logger.debug(
                "Notification %s not pushed to user %s; available via polling",
                row.id,
                row.user_id,
            )
