"""Task access: membership checks and notification recipients.

Admins act on every project of their tenant. Everyone else needs a project
membership; approvers additionally need the team role of the approval level
they act on.
"""

from __future__ import annotations

from workpaper.application.dtos.actor import ActorContext
from workpaper.application.interfaces.repositories import (
    IProjectRepository,
    ITaskRepository,
)
from workpaper.domain.entities import ProjectEntity, TaskEntity
from workpaper.domain.enums import TeamRole
from workpaper.domain.exceptions import AuthorizationException, ResourceNotFoundException


class TaskAccessService:
    """Centralized membership checks for task actions (raises AuthorizationException)."""

    def __init__(
        self, project_repo: IProjectRepository, task_repo: ITaskRepository
    ) -> None:
        self.project_repo = project_repo
        self.task_repo = task_repo

    async def get_visible_project(
        self, actor: ActorContext, project_id: str
    ) -> ProjectEntity:
        """Return the project if the actor may see it; NotFound otherwise."""
        project = await self.project_repo.get(actor.tenant_id, project_id)
        if project is None:
            raise ResourceNotFoundException("project", project_id)
        if not actor.is_admin:
            role = await self.project_repo.get_member_role(project_id, actor.user_id)
            if role is None:
                raise ResourceNotFoundException("project", project_id)
        return project

    async def require_worker(self, actor: ActorContext, task: TaskEntity) -> None:
        if actor.is_admin:
            return
        workers = await self.task_repo.list_worker_ids(task.id)
        if actor.user_id not in workers:
            raise AuthorizationException(
                "task", "submit", message="Only workers assigned to this task can submit it"
            )

    async def can_approve(
        self, actor: ActorContext, task: TaskEntity, level: int
    ) -> bool:
        """Return True if actor may approve task at the given approval level."""
        if actor.is_admin:
            return True
        team_role = await self.project_repo.get_member_role(task.project_id, actor.user_id)
        if team_role is None:
            return False
        required = task.role_for_level(level)
        if required is None:
            return team_role in TeamRole.approving()
        return team_role == required

    async def require_approver(
        self, actor: ActorContext, task: TaskEntity, level: int, action: str
    ) -> None:
        if not await self.can_approve(actor, task, level):
            raise AuthorizationException("task", action)

    async def require_client(self, actor: ActorContext, task: TaskEntity) -> None:
        team_role = await self.project_repo.get_member_role(task.project_id, actor.user_id)
        if team_role != TeamRole.CLIENT:
            raise AuthorizationException(
                "task", "client_reply", message="Only the project's client can reply"
            )

    async def approvers_for(self, task: TaskEntity, level: int) -> list[str]:
        """User ids that may approve task at level."""
        required = task.role_for_level(level)
        roles = [required] if required is not None else sorted(TeamRole.approving())
        return await self.project_repo.list_member_ids(task.project_id, roles)

    async def workers_for(self, task: TaskEntity) -> list[str]:
        return await self.task_repo.list_worker_ids(task.id)

    async def clients_for(self, task: TaskEntity) -> list[str]:
        return await self.project_repo.list_member_ids(task.project_id, [TeamRole.CLIENT])
