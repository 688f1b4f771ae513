"""SQL repositories implementing the application repository protocols."""

from workpaper.infrastructure.persistence.repositories.activity_log_repo import (
    ActivityLogRepository,
)
from workpaper.infrastructure.persistence.repositories.assignment_repo import (
    AssignmentRepository,
)
from workpaper.infrastructure.persistence.repositories.document_request_repo import (
    DocumentRequestRepository,
)
from workpaper.infrastructure.persistence.repositories.notification_repo import (
    NotificationRepository,
)
from workpaper.infrastructure.persistence.repositories.project_repo import (
    ProjectRepository,
)
from workpaper.infrastructure.persistence.repositories.task_repo import TaskRepository

__all__ = [
    "ActivityLogRepository",
    "AssignmentRepository",
    "DocumentRequestRepository",
    "NotificationRepository",
    "ProjectRepository",
    "TaskRepository",
]
