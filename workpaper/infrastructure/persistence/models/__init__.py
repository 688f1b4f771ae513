"""Persistence models: ORM entities and mixins.

Importing this package registers every table on Base.metadata (Alembic
env.py relies on it).
"""

from workpaper.infrastructure.persistence.models.activity_log import ActivityLog
from workpaper.infrastructure.persistence.models.assignment import (
    Assignment,
    ClientDocumentRequest,
    Document,
)
from workpaper.infrastructure.persistence.models.mixins import (
    CuidMixin,
    MultiTenantModel,
    TenantMixin,
    TimestampMixin,
    VersionedMixin,
)
from workpaper.infrastructure.persistence.models.notification import Notification
from workpaper.infrastructure.persistence.models.project import (
    Project,
    ProjectMember,
    WorkingStep,
)
from workpaper.infrastructure.persistence.models.task import Task, TaskWorker
from workpaper.infrastructure.persistence.models.tenant import Tenant
from workpaper.infrastructure.persistence.models.user import User

__all__ = [
    "ActivityLog",
    "Assignment",
    "ClientDocumentRequest",
    "CuidMixin",
    "Document",
    "MultiTenantModel",
    "Notification",
    "Project",
    "ProjectMember",
    "Task",
    "TaskWorker",
    "TenantMixin",
    "Tenant",
    "TimestampMixin",
    "User",
    "VersionedMixin",
    "WorkingStep",
]
