"""Project and working step domain entities."""

from dataclasses import dataclass

from workpaper.domain.enums import ProjectStatus


@dataclass
class ProjectEntity:
    """Domain entity for a client engagement (project) inside a tenant."""

    id: str
    tenant_id: str
    name: str
    client_name: str | None
    status: ProjectStatus

    def is_active(self) -> bool:
        """Return whether tasks in this project may be mutated."""
        return self.status == ProjectStatus.IN_PROGRESS


@dataclass
class WorkingStepEntity:
    """Ordered phase of a project; a locked step blocks worker submissions."""

    id: str
    project_id: str
    name: str
    order: int
    is_locked: bool
