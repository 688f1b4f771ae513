"""Notification repository: per-user rows and one-way read marks."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from workpaper.domain.entities import NotificationEntity, read_state
from workpaper.domain.enums import NotificationType
from workpaper.infrastructure.persistence.models.notification import Notification
from workpaper.shared.utils.datetime import ensure_utc, utc_now


def _to_entity(n: Notification) -> NotificationEntity:
    return NotificationEntity(
        id=n.id,
        tenant_id=n.tenant_id,
        user_id=n.user_id,
        type=NotificationType(n.type),
        title=n.title,
        message=n.message,
        url=n.url,
        created_at=ensure_utc(n.created_at) or n.created_at,
        task_id=n.task_id,
        project_id=n.project_id,
        data=dict(n.data or {}),
        state=read_state(ensure_utc(n.read_at)),
    )


class NotificationRepository:
    """Implements INotificationRepository."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def add_for_users(
        self,
        tenant_id: str,
        user_ids: list[str],
        *,
        type: NotificationType,
        title: str,
        message: str,
        url: str | None,
        task_id: str | None,
        project_id: str | None,
        data: dict[str, Any],
    ) -> list[NotificationEntity]:
        """Insert inside a savepoint so a failed insert does not poison the transition."""
        created_at = utc_now()
        rows = [
            Notification(
                tenant_id=tenant_id,
                user_id=user_id,
                type=type.value,
                title=title,
                message=message,
                url=url,
                task_id=task_id,
                project_id=project_id,
                data=data,
                created_at=created_at,
            )
            for user_id in user_ids
        ]
        async with self.db.begin_nested():
            self.db.add_all(rows)
            await self.db.flush()
        return [_to_entity(n) for n in rows]

    async def list_for_user(
        self, tenant_id: str, user_id: str, limit: int
    ) -> list[NotificationEntity]:
        result = await self.db.execute(
            select(Notification)
            .where(Notification.tenant_id == tenant_id, Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
        )
        return [_to_entity(n) for n in result.scalars().all()]

    async def count_unread(self, tenant_id: str, user_id: str) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(Notification)
            .where(
                Notification.tenant_id == tenant_id,
                Notification.user_id == user_id,
                Notification.read_at.is_(None),
            )
        )
        return int(result.scalar_one())

    async def get_for_user(
        self, tenant_id: str, user_id: str, notification_id: str
    ) -> NotificationEntity | None:
        result = await self.db.execute(
            select(Notification)
            .where(
                Notification.id == notification_id,
                Notification.tenant_id == tenant_id,
                Notification.user_id == user_id,
            )
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        return _to_entity(row) if row else None

    async def mark_read(
        self, tenant_id: str, user_id: str, notification_id: str, read_at: datetime
    ) -> bool:
        result = await self.db.execute(
            update(Notification)
            .where(
                Notification.id == notification_id,
                Notification.tenant_id == tenant_id,
                Notification.user_id == user_id,
                Notification.read_at.is_(None),
            )
            .values(read_at=read_at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def mark_all_read(self, tenant_id: str, user_id: str, read_at: datetime) -> int:
        result = await self.db.execute(
            update(Notification)
            .where(
                Notification.tenant_id == tenant_id,
                Notification.user_id == user_id,
                Notification.read_at.is_(None),
            )
            .values(read_at=read_at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def mark_read_by_context(
        self,
        tenant_id: str,
        user_id: str,
        read_at: datetime,
        *,
        type: NotificationType | None = None,
        task_id: str | None = None,
        project_id: str | None = None,
    ) -> int:
        stmt = update(Notification).where(
            Notification.tenant_id == tenant_id,
            Notification.user_id == user_id,
            Notification.read_at.is_(None),
        )
        if type is not None:
            stmt = stmt.where(Notification.type == type.value)
        if task_id is not None:
            stmt = stmt.where(Notification.task_id == task_id)
        if project_id is not None:
            stmt = stmt.where(Notification.project_id == project_id)
        result = await self.db.execute(
            stmt.values(read_at=read_at).execution_options(synchronize_session=False)
        )
        return result.rowcount
