"""Activity log repository."""

from __future__ import annotations

from collections.abc import Collection
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from workpaper.domain.entities import ActivityEntity
from workpaper.infrastructure.persistence.models.activity_log import ActivityLog
from workpaper.shared.utils.datetime import ensure_utc, utc_now


def _to_entity(a: ActivityLog) -> ActivityEntity:
    return ActivityEntity(
        id=a.id,
        tenant_id=a.tenant_id,
        project_id=a.project_id,
        task_id=a.task_id,
        user_id=a.user_id,
        action=a.action,
        description=a.description,
        meta=dict(a.meta or {}),
        created_at=ensure_utc(a.created_at) or a.created_at,
    )


class ActivityLogRepository:
    """Implements IActivityLogRepository."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def record(
        self,
        tenant_id: str,
        *,
        project_id: str,
        task_id: str | None,
        user_id: str,
        action: str,
        description: str,
        meta: dict[str, Any],
    ) -> ActivityEntity:
        entry = ActivityLog(
            tenant_id=tenant_id,
            project_id=project_id,
            task_id=task_id,
            user_id=user_id,
            action=action,
            description=description,
            meta=meta,
            created_at=utc_now(),
        )
        self.db.add(entry)
        await self.db.flush()
        return _to_entity(entry)

    async def list_recent(
        self, tenant_id: str, project_ids: Collection[str], limit: int
    ) -> list[ActivityEntity]:
        if not project_ids:
            return []
        result = await self.db.execute(
            select(ActivityLog)
            .where(
                ActivityLog.tenant_id == tenant_id,
                ActivityLog.project_id.in_(list(project_ids)),
            )
            .order_by(ActivityLog.created_at.desc())
            .limit(limit)
        )
        return [_to_entity(a) for a in result.scalars().all()]
