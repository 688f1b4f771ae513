"""Project repository: projects, team membership and working steps."""

from __future__ import annotations

from collections.abc import Collection

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from workpaper.domain.entities import ProjectEntity, WorkingStepEntity
from workpaper.domain.enums import ProjectStatus, TeamRole
from workpaper.infrastructure.persistence.models.project import (
    Project,
    ProjectMember,
    WorkingStep,
)


def _to_entity(p: Project) -> ProjectEntity:
    return ProjectEntity(
        id=p.id,
        tenant_id=p.tenant_id,
        name=p.name,
        client_name=p.client_name,
        status=ProjectStatus(p.status),
    )


def _step_to_entity(s: WorkingStep) -> WorkingStepEntity:
    return WorkingStepEntity(
        id=s.id,
        project_id=s.project_id,
        name=s.name,
        order=s.order,
        is_locked=s.is_locked,
    )


class ProjectRepository:
    """Implements IProjectRepository."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get(self, tenant_id: str, project_id: str) -> ProjectEntity | None:
        result = await self.db.execute(
            select(Project).where(Project.id == project_id, Project.tenant_id == tenant_id)
        )
        row = result.scalar_one_or_none()
        return _to_entity(row) if row else None

    async def list_project_ids(self, tenant_id: str) -> list[str]:
        result = await self.db.execute(
            select(Project.id).where(Project.tenant_id == tenant_id).order_by(Project.created_at)
        )
        return list(result.scalars().all())

    async def get_memberships(self, tenant_id: str, user_id: str) -> dict[str, TeamRole]:
        result = await self.db.execute(
            select(ProjectMember.project_id, ProjectMember.team_role)
            .join(Project, Project.id == ProjectMember.project_id)
            .where(Project.tenant_id == tenant_id, ProjectMember.user_id == user_id)
        )
        return {project_id: TeamRole(role) for project_id, role in result.all()}

    async def get_member_role(self, project_id: str, user_id: str) -> TeamRole | None:
        result = await self.db.execute(
            select(ProjectMember.team_role).where(
                ProjectMember.project_id == project_id,
                ProjectMember.user_id == user_id,
            )
        )
        role = result.scalar_one_or_none()
        return TeamRole(role) if role else None

    async def list_member_ids(
        self, project_id: str, team_roles: Collection[TeamRole]
    ) -> list[str]:
        if not team_roles:
            return []
        result = await self.db.execute(
            select(ProjectMember.user_id)
            .where(
                ProjectMember.project_id == project_id,
                ProjectMember.team_role.in_([r.value for r in team_roles]),
            )
            .order_by(ProjectMember.created_at)
        )
        return list(result.scalars().all())

    async def get_step(self, step_id: str) -> WorkingStepEntity | None:
        result = await self.db.execute(
            select(WorkingStep)
            .where(WorkingStep.id == step_id)
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        return _step_to_entity(row) if row else None

    async def unlock_next_step(
        self, project_id: str, after_order: int
    ) -> WorkingStepEntity | None:
        """Unlock the step directly after after_order if it is locked."""
        result = await self.db.execute(
            select(WorkingStep)
            .where(WorkingStep.project_id == project_id, WorkingStep.order > after_order)
            .order_by(WorkingStep.order)
            .limit(1)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        step = result.scalar_one_or_none()
        if step is None or not step.is_locked:
            return None
        await self.db.execute(
            update(WorkingStep)
            .where(WorkingStep.id == step.id)
            .values(is_locked=False)
            .execution_options(synchronize_session=False)
        )
        return WorkingStepEntity(
            id=step.id,
            project_id=step.project_id,
            name=step.name,
            order=step.order,
            is_locked=False,
        )
