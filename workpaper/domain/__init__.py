"""Domain layer: entities, enums, workflow rules, notification events and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from workpaper.domain.enums import (
    ActorRole,
    ClientInteract,
    CompletionStatus,
    NotificationType,
    ProjectStatus,
    TaskStatus,
    TeamRole,
    WorkerAction,
    WorkflowAction,
)
from workpaper.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    InvalidStateException,
    ProjectNotActiveException,
    ResourceNotFoundException,
    ValidationException,
    WorkpaperException,
)

__all__ = [
    # Enums
    "ActorRole",
    "ClientInteract",
    "CompletionStatus",
    "NotificationType",
    "ProjectStatus",
    "TaskStatus",
    "TeamRole",
    "WorkerAction",
    "WorkflowAction",
    # Exceptions
    "AuthenticationException",
    "AuthorizationException",
    "InvalidStateException",
    "ProjectNotActiveException",
    "ResourceNotFoundException",
    "ValidationException",
    "WorkpaperException",
]
