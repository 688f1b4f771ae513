"""Application interfaces (ports): repository and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from workpaper.infrastructure or workpaper.api.
"""

from workpaper.application.interfaces.repositories import (
    IActivityLogRepository,
    IAssignmentRepository,
    IDocumentRequestRepository,
    INotificationRepository,
    IProjectRepository,
    ITaskRepository,
)
from workpaper.application.interfaces.services import (
    INotificationDispatcher,
    INotificationPublisher,
)

__all__ = [
    "IActivityLogRepository",
    "IAssignmentRepository",
    "IDocumentRequestRepository",
    "INotificationDispatcher",
    "INotificationPublisher",
    "INotificationRepository",
    "IProjectRepository",
    "ITaskRepository",
]
