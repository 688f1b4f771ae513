"""Domain enumerations for workpaper.

Fixed sets of workflow values: project and task status, client interaction
mode, actor and team roles, notification types.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class ProjectStatus(_ValuesMixin, str, Enum):
    """Project lifecycle status. Only IN_PROGRESS allows task mutations."""

    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    SUSPENDED = "Suspended"
    CANCELED = "Canceled"


class TaskStatus(_ValuesMixin, str, Enum):
    """Workflow state of a task (mirrors its latest assignment)."""

    DRAFT = "Draft"
    SUBMITTED = "Submitted"
    UNDER_REVIEW = "Under Review"
    APPROVED = "Approved"
    RETURNED_FOR_REVISION = "Returned for Revision"
    SUBMITTED_TO_CLIENT = "Submitted to Client"
    CLIENT_REPLY = "Client Reply"
    COMPLETED = "Completed"

    @property
    def is_terminal_approved(self) -> bool:
        return self in (TaskStatus.APPROVED, TaskStatus.COMPLETED)

    @property
    def awaits_approval(self) -> bool:
        return self in (TaskStatus.SUBMITTED, TaskStatus.UNDER_REVIEW)


class CompletionStatus(_ValuesMixin, str, Enum):
    """Completion status derived from TaskStatus."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

    @classmethod
    def for_status(cls, status: TaskStatus) -> "CompletionStatus":
        """Derive completion from workflow status (Draft is pending, terminal-approved is completed)."""
        if status.is_terminal_approved:
            return cls.COMPLETED
        if status == TaskStatus.DRAFT:
            return cls.PENDING
        return cls.IN_PROGRESS


class ClientInteract(_ValuesMixin, str, Enum):
    """How the client may interact with a task once it is submitted to them."""

    READ_ONLY = "read_only"
    COMMENT = "comment"
    UPLOAD = "upload"


class ActorRole(_ValuesMixin, str, Enum):
    """Role of the acting user, taken from the auth context."""

    ADMIN = "admin"
    APPROVER = "approver"
    WORKER = "worker"
    CLIENT = "client"


class TeamRole(_ValuesMixin, str, Enum):
    """Role of a user inside one project team."""

    WORKER = "worker"
    TEAM_LEADER = "team_leader"
    MANAGER = "manager"
    SUPERVISOR = "supervisor"
    PARTNER = "partner"
    CLIENT = "client"

    @classmethod
    def approving(cls) -> frozenset["TeamRole"]:
        """Team roles allowed to sit on an approval chain."""
        return frozenset({cls.TEAM_LEADER, cls.MANAGER, cls.SUPERVISOR, cls.PARTNER})


class NotificationType(_ValuesMixin, str, Enum):
    """Type tag stored on each notification row."""

    APPROVAL = "approval"
    ASSIGNMENT = "assignment"
    ACTIVITY = "activity"
    CLIENT_TASK = "client_task"
    DOCUMENT_REQUEST = "document_request"


class WorkflowAction(_ValuesMixin, str, Enum):
    """Actions accepted by the task state machine."""

    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"
    CLIENT_REPLY = "client_reply"
    ACCEPT_CLIENT_DOCUMENTS = "accept_client_documents"
    REQUEST_REUPLOAD = "request_reupload"


class WorkerAction(_ValuesMixin, str, Enum):
    """What happened to a worker's task (drives the worker notification text)."""

    COMPANY_APPROVED = "company_approved"
    COMPANY_REJECTED = "company_rejected"
    TASK_COMPLETED = "task_completed"
    CLIENT_REPLIED = "client_replied"
    REUPLOAD_REQUESTED = "reupload_requested"
