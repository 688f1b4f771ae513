"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference domain entities or application DTOs only; no infrastructure imports.

Mutating methods that guard a one-way transition (status changes, client
reply, fulfillment, read marks) are conditional writes: they return False
(or 0) when the guarded precondition no longer holds, so the caller can
raise InvalidStateException instead of double-applying.
"""

from __future__ import annotations

from collections.abc import Collection
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

from workpaper.domain.enums import (
    CompletionStatus,
    NotificationType,
    TaskStatus,
    TeamRole,
)

if TYPE_CHECKING:
    from workpaper.application.dtos.dashboard import PendingApproval
    from workpaper.application.dtos.workflow import DocumentRequestInput, UploadedFile
    from workpaper.domain.entities import (
        ActivityEntity,
        AssignmentEntity,
        ClientDocumentRequestEntity,
        NotificationEntity,
        ProjectEntity,
        TaskEntity,
        WorkingStepEntity,
    )


# Project repository interface
class IProjectRepository(Protocol):
    """Protocol for projects, team membership and working steps."""

    async def get(self, tenant_id: str, project_id: str) -> ProjectEntity | None:
        """Return project by id within tenant."""

    async def list_project_ids(self, tenant_id: str) -> list[str]:
        """Return ids of every project in tenant."""

    async def get_memberships(self, tenant_id: str, user_id: str) -> dict[str, TeamRole]:
        """Return project_id -> team role for every project the user belongs to."""

    async def get_member_role(self, project_id: str, user_id: str) -> TeamRole | None:
        """Return the user's team role in project, or None when not a member."""

    async def list_member_ids(
        self, project_id: str, team_roles: Collection[TeamRole]
    ) -> list[str]:
        """Return user ids of members holding any of team_roles."""

    async def get_step(self, step_id: str) -> WorkingStepEntity | None:
        """Return working step by id."""

    async def unlock_next_step(
        self, project_id: str, after_order: int
    ) -> WorkingStepEntity | None:
        """Unlock the first locked step ordered after after_order; return it or None."""


# Task repository interface
class ITaskRepository(Protocol):
    """Protocol for task reads, status writes and dashboard counts."""

    async def get(
        self, tenant_id: str, task_id: str, *, for_update: bool = False
    ) -> TaskEntity | None:
        """Return task by id; for_update locks the row until the transaction ends."""

    async def list_worker_ids(self, task_id: str) -> list[str]:
        """Return user ids of workers assigned to the task."""

    async def update_status(
        self,
        task_id: str,
        *,
        expected: TaskStatus,
        status: TaskStatus,
        completion_status: CompletionStatus,
        completed_at: datetime | None,
    ) -> bool:
        """Set status if the task is still in expected. Return False otherwise."""

    async def count_incomplete_required(self, step_id: str) -> int:
        """Count required tasks in step that are not completed."""

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
        """Count tasks in project_ids matching every given filter."""

    async def list_pending_approvals(
        self, tenant_id: str, project_ids: Collection[str]
    ) -> list[PendingApproval]:
        """Return tasks awaiting approval with their latest assignment's level."""


# Assignment repository interface
class IAssignmentRepository(Protocol):
    """Protocol for the append-only assignment log."""

    async def get(self, tenant_id: str, assignment_id: str) -> AssignmentEntity | None:
        """Return assignment with documents and client document requests."""

    async def get_latest(self, task_id: str) -> AssignmentEntity | None:
        """Return the assignment with the highest sequence for task."""

    async def list_for_task(self, task_id: str) -> list[AssignmentEntity]:
        """Return all assignments for task, most recent first."""

    async def append(
        self,
        tenant_id: str,
        task_id: str,
        *,
        sequence: int,
        worker_id: str,
        notes: str | None,
        status: TaskStatus,
        approval_level: int,
        documents: list[UploadedFile],
        requests: list[DocumentRequestInput],
    ) -> AssignmentEntity:
        """Insert a new assignment. Raises InvalidStateException if sequence is taken."""

    async def transition(
        self,
        assignment_id: str,
        *,
        expected_status: TaskStatus,
        expected_version: int,
        status: TaskStatus,
        approval_level: int | None = None,
        rejection_comment: str | None = None,
    ) -> bool:
        """Compare-and-set status on (status, version); bumps version. Return False on conflict."""

    async def record_client_reply(
        self, assignment_id: str, *, comment: str, replied_at: datetime
    ) -> bool:
        """Set the one-shot client reply and status Client Reply. Return False if already replied."""


# Client document request repository interface
class IDocumentRequestRepository(Protocol):
    """Protocol for client document requests (ledger rows)."""

    async def add(
        self,
        tenant_id: str,
        assignment_id: str,
        items: list[DocumentRequestInput],
    ) -> list[ClientDocumentRequestEntity]:
        """Create unfulfilled requests."""

    async def get(
        self, tenant_id: str, request_id: str
    ) -> ClientDocumentRequestEntity | None:
        """Return request by id within tenant."""

    async def list_for_assignment(
        self, assignment_id: str
    ) -> list[ClientDocumentRequestEntity]:
        """Return requests of an assignment in creation order."""

    async def fulfill(
        self, request_id: str, *, file_path: str, uploaded_at: datetime
    ) -> bool:
        """Attach file if still unfulfilled (single conditional UPDATE). Return False otherwise."""


# Notification repository interface
class INotificationRepository(Protocol):
    """Protocol for persisted notifications."""

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
        """Insert one unread notification per user."""

    async def list_for_user(
        self, tenant_id: str, user_id: str, limit: int
    ) -> list[NotificationEntity]:
        """Return user's notifications, newest first."""

    async def count_unread(self, tenant_id: str, user_id: str) -> int:
        """Return number of unread notifications for user."""

    async def get_for_user(
        self, tenant_id: str, user_id: str, notification_id: str
    ) -> NotificationEntity | None:
        """Return notification if it belongs to user."""

    async def mark_read(
        self, tenant_id: str, user_id: str, notification_id: str, read_at: datetime
    ) -> bool:
        """Set read_at if null. Return False when already read or not found."""

    async def mark_all_read(self, tenant_id: str, user_id: str, read_at: datetime) -> int:
        """Set read_at on every unread notification of user; return rows changed."""

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
        """Mark unread notifications matching the context as read; return rows changed."""


# Activity log repository interface
class IActivityLogRepository(Protocol):
    """Protocol for the workflow activity log."""

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
        """Append an activity entry."""

    async def list_recent(
        self, tenant_id: str, project_ids: Collection[str], limit: int
    ) -> list[ActivityEntity]:
        """Return latest entries in project_ids, newest first."""
