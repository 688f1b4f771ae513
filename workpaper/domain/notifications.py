"""Notification events: one tagged variant per notification type.

Each variant carries only the fields its type needs and renders its own
title, message and deep-link url. The dispatcher persists one row per
target user and publishes event_name on the user's real-time channel.
"""

from dataclasses import dataclass
from typing import Any, ClassVar

from workpaper.domain.enums import NotificationType, TaskStatus, TeamRole, WorkerAction


@dataclass(frozen=True)
class TaskRef:
    """Task and project names used when rendering notification text."""

    task_id: str
    task_name: str
    project_id: str
    project_name: str


@dataclass(frozen=True, kw_only=True)
class _TaskNotification:
    type: ClassVar[NotificationType]
    event_name: ClassVar[str]

    target_user_ids: tuple[str, ...]
    task: TaskRef

    @property
    def title(self) -> str:
        raise NotImplementedError

    @property
    def message(self) -> str:
        raise NotImplementedError

    @property
    def url(self) -> str | None:
        return None

    def data(self) -> dict[str, Any]:
        """Context stored in the notification's data column."""
        return {
            "task_id": self.task.task_id,
            "task_name": self.task.task_name,
            "project_id": self.task.project_id,
            "project_name": self.task.project_name,
        }


@dataclass(frozen=True, kw_only=True)
class ApprovalRequested(_TaskNotification):
    type: ClassVar[NotificationType] = NotificationType.APPROVAL
    event_name: ClassVar[str] = "NewApprovalNotification"

    level: int
    role: TeamRole | None = None

    @property
    def title(self) -> str:
        return "New Approval Required"

    @property
    def message(self) -> str:
        return (
            f"Task '{self.task.task_name}' in project "
            f"'{self.task.project_name}' requires your approval"
        )

    @property
    def url(self) -> str:
        return f"/company/tasks/{self.task.task_id}/approval-detail"

    def data(self) -> dict[str, Any]:
        return {
            **super().data(),
            "approval_level": self.level,
            "approval_role": self.role.value if self.role else None,
        }


_WORKER_TITLES: dict[WorkerAction, str] = {
    WorkerAction.COMPANY_APPROVED: "Task Approved",
    WorkerAction.COMPANY_REJECTED: "Task Returned for Revision",
    WorkerAction.TASK_COMPLETED: "Task Completed",
    WorkerAction.CLIENT_REPLIED: "Client Replied",
    WorkerAction.REUPLOAD_REQUESTED: "Re-upload Requested",
}

_WORKER_MESSAGES: dict[WorkerAction, str] = {
    WorkerAction.COMPANY_APPROVED: "Your task '{task}' has been approved and forwarded to the next level",
    WorkerAction.COMPANY_REJECTED: "Your task '{task}' has been rejected and needs revision",
    WorkerAction.TASK_COMPLETED: "Your task '{task}' has been fully approved and completed",
    WorkerAction.CLIENT_REPLIED: "Client replied to your task '{task}' in project '{project}'",
    WorkerAction.REUPLOAD_REQUESTED: (
        "Client was asked to re-upload documents for your task '{task}' in project '{project}'"
    ),
}


@dataclass(frozen=True, kw_only=True)
class WorkerTaskUpdate(_TaskNotification):
    type: ClassVar[NotificationType] = NotificationType.ASSIGNMENT
    event_name: ClassVar[str] = "NewWorkerTaskNotification"

    action: WorkerAction
    comment: str | None = None

    @property
    def title(self) -> str:
        return _WORKER_TITLES[self.action]

    @property
    def message(self) -> str:
        text = _WORKER_MESSAGES[self.action].format(
            task=self.task.task_name, project=self.task.project_name
        )
        if self.comment:
            text = f"{text}. Reason: {self.comment}"
        return text

    @property
    def url(self) -> str:
        return f"/company/tasks/{self.task.task_id}"

    def data(self) -> dict[str, Any]:
        return {**super().data(), "action_type": self.action.value}


@dataclass(frozen=True, kw_only=True)
class ClientTaskUpdate(_TaskNotification):
    type: ClassVar[NotificationType] = NotificationType.CLIENT_TASK
    event_name: ClassVar[str] = "NewClientTaskNotification"

    status: TaskStatus
    comment: str | None = None

    @property
    def title(self) -> str:
        if self.status == TaskStatus.COMPLETED:
            return "Task Completed"
        return "Task Requires Your Attention"

    @property
    def message(self) -> str:
        name = self.task.task_name
        if self.status == TaskStatus.COMPLETED:
            return f"Your documents for task '{name}' have been accepted"
        if self.comment:
            return f"Please re-upload documents for task '{name}'. Comment: {self.comment}"
        return f"New task '{name}' has been submitted for your review"

    @property
    def url(self) -> str:
        return f"/client/tasks/{self.task.task_id}"

    def data(self) -> dict[str, Any]:
        return {**super().data(), "status": self.status.value}


@dataclass(frozen=True, kw_only=True)
class ClientDocumentsRequested(_TaskNotification):
    type: ClassVar[NotificationType] = NotificationType.DOCUMENT_REQUEST
    event_name: ClassVar[str] = "NewClientTaskNotification"

    document_names: tuple[str, ...]

    @property
    def title(self) -> str:
        return "Documents Requested"

    @property
    def message(self) -> str:
        names = ", ".join(self.document_names)
        return f"Please upload the following for task '{self.task.task_name}': {names}"

    @property
    def url(self) -> str:
        return f"/client/tasks/{self.task.task_id}"

    def data(self) -> dict[str, Any]:
        return {**super().data(), "document_names": list(self.document_names)}


@dataclass(frozen=True, kw_only=True)
class ActivityNotice(_TaskNotification):
    type: ClassVar[NotificationType] = NotificationType.ACTIVITY
    event_name: ClassVar[str] = "NewActivityNotification"

    summary: str

    @property
    def title(self) -> str:
        return "Task Activity"

    @property
    def message(self) -> str:
        return f"{self.summary} on task '{self.task.task_name}' in project '{self.task.project_name}'"

    @property
    def url(self) -> str:
        return f"/company/tasks/{self.task.task_id}"


NotificationEvent = (
    ApprovalRequested
    | WorkerTaskUpdate
    | ClientTaskUpdate
    | ClientDocumentsRequested
    | ActivityNotice
)
