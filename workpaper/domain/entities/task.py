"""Task domain entity.

A task is a unit of work inside a project's working step. Configuration
fields are fixed at creation; status, completion_status and completed_at are
changed only by the task state machine.
"""

from dataclasses import dataclass, field
from datetime import datetime

from workpaper.domain.enums import (
    ClientInteract,
    CompletionStatus,
    TaskStatus,
    TeamRole,
)


@dataclass
class TaskEntity:
    """Domain entity for a task and its workflow position."""

    id: str
    tenant_id: str
    project_id: str
    working_step_id: str
    name: str
    order: int
    is_required: bool
    client_interact: ClientInteract
    multiple_files: bool
    status: TaskStatus
    completion_status: CompletionStatus
    approval_chain: list[TeamRole] = field(default_factory=list)
    due_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def approval_levels(self) -> int:
        """Number of approval levels; an empty chain is a single level."""
        return max(len(self.approval_chain), 1)

    def is_final_level(self, level: int) -> bool:
        return level >= self.approval_levels - 1

    def role_for_level(self, level: int) -> TeamRole | None:
        """Team role that approves at level, or None when any approving role may."""
        if level < len(self.approval_chain):
            return self.approval_chain[level]
        return None

    def accepts_client_input(self) -> bool:
        return self.client_interact != ClientInteract.READ_ONLY
