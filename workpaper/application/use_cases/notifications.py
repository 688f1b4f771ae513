"""Notification queries and read marks for the acting user."""

from __future__ import annotations

from workpaper.application.dtos.actor import ActorContext
from workpaper.application.dtos.dashboard import NotificationPage
from workpaper.application.interfaces.repositories import INotificationRepository
from workpaper.domain.entities import NotificationEntity
from workpaper.domain.enums import NotificationType
from workpaper.domain.exceptions import ResourceNotFoundException, ValidationException
from workpaper.shared.utils.datetime import utc_now


class NotificationService:
    """List notifications and mark them read. Users only ever see their own."""

    def __init__(
        self, notification_repo: INotificationRepository, list_limit: int = 50
    ) -> None:
        self.notification_repo = notification_repo
        self.list_limit = list_limit

    async def list_for_user(self, actor: ActorContext) -> NotificationPage:
        items = await self.notification_repo.list_for_user(
            actor.tenant_id, actor.user_id, self.list_limit
        )
        unread = await self.notification_repo.count_unread(actor.tenant_id, actor.user_id)
        return NotificationPage(items=items, unread_count=unread)

    async def unread_count(self, actor: ActorContext) -> int:
        return await self.notification_repo.count_unread(actor.tenant_id, actor.user_id)

    async def mark_read(
        self, actor: ActorContext, notification_id: str
    ) -> NotificationEntity:
        """Mark one notification read. Marking an already-read one is a no-op."""
        notification = await self.notification_repo.get_for_user(
            actor.tenant_id, actor.user_id, notification_id
        )
        if notification is None:
            raise ResourceNotFoundException("notification", notification_id)
        if notification.is_read:
            return notification
        await self.notification_repo.mark_read(
            actor.tenant_id, actor.user_id, notification_id, utc_now()
        )
        refreshed = await self.notification_repo.get_for_user(
            actor.tenant_id, actor.user_id, notification_id
        )
        if refreshed is None:
            raise ResourceNotFoundException("notification", notification_id)
        return refreshed

    async def mark_all_read(self, actor: ActorContext) -> int:
        return await self.notification_repo.mark_all_read(
            actor.tenant_id, actor.user_id, utc_now()
        )

    async def mark_read_by_context(
        self,
        actor: ActorContext,
        *,
        type: NotificationType | None = None,
        task_id: str | None = None,
        project_id: str | None = None,
    ) -> int:
        """Mark unread notifications about a task or project read (e.g. when opening it)."""
        if not task_id and not project_id:
            raise ValidationException(
                "task_id or project_id is required", field="task_id"
            )
        return await self.notification_repo.mark_read_by_context(
            actor.tenant_id,
            actor.user_id,
            utc_now(),
            type=type,
            task_id=task_id,
            project_id=project_id,
        )
