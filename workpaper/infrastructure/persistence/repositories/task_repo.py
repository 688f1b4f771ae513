"""Task repository: reads, locked loads, conditional status writes and dashboard counts."""

from __future__ import annotations

from collections.abc import Collection
from datetime import datetime

from sqlalchemy import exists, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from workpaper.application.dtos.dashboard import PendingApproval
from workpaper.domain.entities import TaskEntity
from workpaper.domain.enums import (
    ClientInteract,
    CompletionStatus,
    TaskStatus,
    TeamRole,
)
from workpaper.infrastructure.persistence.models.assignment import Assignment
from workpaper.infrastructure.persistence.models.task import Task, TaskWorker
from workpaper.shared.utils.datetime import ensure_utc

_AWAITING_APPROVAL = (TaskStatus.SUBMITTED.value, TaskStatus.UNDER_REVIEW.value)


def _to_entity(t: Task) -> TaskEntity:
    return TaskEntity(
        id=t.id,
        tenant_id=t.tenant_id,
        project_id=t.project_id,
        working_step_id=t.working_step_id,
        name=t.name,
        order=t.order,
        is_required=t.is_required,
        client_interact=ClientInteract(t.client_interact),
        multiple_files=t.multiple_files,
        status=TaskStatus(t.status),
        completion_status=CompletionStatus(t.completion_status),
        approval_chain=[TeamRole(r) for r in (t.approval_chain or [])],
        due_at=ensure_utc(t.due_at),
        completed_at=ensure_utc(t.completed_at),
    )


class TaskRepository:
    """Implements ITaskRepository."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get(
        self, tenant_id: str, task_id: str, *, for_update: bool = False
    ) -> TaskEntity | None:
        stmt = (
            select(Task)
            .where(Task.id == task_id, Task.tenant_id == tenant_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        row = result.scalar_one_or_none()
        return _to_entity(row) if row else None

    async def list_worker_ids(self, task_id: str) -> list[str]:
        result = await self.db.execute(
            select(TaskWorker.user_id)
            .where(TaskWorker.task_id == task_id)
            .order_by(TaskWorker.created_at)
        )
        return list(result.scalars().all())

    async def update_status(
        self,
        task_id: str,
        *,
        expected: TaskStatus,
        status: TaskStatus,
        completion_status: CompletionStatus,
        completed_at: datetime | None,
    ) -> bool:
        result = await self.db.execute(
            update(Task)
            .where(Task.id == task_id, Task.status == expected.value)
            .values(
                status=status.value,
                completion_status=completion_status.value,
                completed_at=completed_at,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def count_incomplete_required(self, step_id: str) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(Task)
            .where(
                Task.working_step_id == step_id,
                Task.is_required.is_(True),
                Task.completion_status != CompletionStatus.COMPLETED.value,
            )
        )
        return int(result.scalar_one())

    async def count_tasks(
        self,
        tenant_id: str,
        project_ids: Collection[str],
        *,
        completion: Collection[CompletionStatus] | None = None,
        statuses: Collection[TaskStatus] | None = None,
        worker_id: str | None = None,
        completed_since: datetime | None = None,
        overdue_at: datetime | None = None,
    ) -> int:
        if not project_ids:
            return 0
        stmt = (
            select(func.count())
            .select_from(Task)
            .where(Task.tenant_id == tenant_id, Task.project_id.in_(list(project_ids)))
        )
        if completion is not None:
            stmt = stmt.where(Task.completion_status.in_([c.value for c in completion]))
        if statuses is not None:
            stmt = stmt.where(Task.status.in_([s.value for s in statuses]))
        if worker_id is not None:
            stmt = stmt.where(
                exists().where(TaskWorker.task_id == Task.id, TaskWorker.user_id == worker_id)
            )
        if completed_since is not None:
            stmt = stmt.where(Task.completed_at >= completed_since)
        if overdue_at is not None:
            stmt = stmt.where(Task.due_at.is_not(None), Task.due_at < overdue_at)
        result = await self.db.execute(stmt)
        return int(result.scalar_one())

    async def list_pending_approvals(
        self, tenant_id: str, project_ids: Collection[str]
    ) -> list[PendingApproval]:
        if not project_ids:
            return []
        latest = (
            select(Assignment.task_id, func.max(Assignment.sequence).label("sequence"))
            .group_by(Assignment.task_id)
            .subquery()
        )
        result = await self.db.execute(
            select(Task.id, Task.project_id, Task.approval_chain, Assignment.approval_level)
            .join(latest, latest.c.task_id == Task.id)
            .join(
                Assignment,
                (Assignment.task_id == latest.c.task_id)
                & (Assignment.sequence == latest.c.sequence),
            )
            .where(
                Task.tenant_id == tenant_id,
                Task.project_id.in_(list(project_ids)),
                Task.status.in_(_AWAITING_APPROVAL),
            )
        )
        return [
            PendingApproval(
                task_id=task_id,
                project_id=project_id,
                approval_chain=list(chain or []),
                approval_level=level,
            )
            for task_id, project_id, chain, level in result.all()
        ]
