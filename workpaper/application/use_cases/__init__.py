"""Application use cases: task workflow, documents, notifications, dashboard."""

from workpaper.application.use_cases.assignments import AssignmentStore
from workpaper.application.use_cases.dashboard import DashboardAggregator
from workpaper.application.use_cases.documents import DocumentRequestLedger
from workpaper.application.use_cases.notifications import NotificationService
from workpaper.application.use_cases.tasks import TaskStateMachine

__all__ = [
    "AssignmentStore",
    "DashboardAggregator",
    "DocumentRequestLedger",
    "NotificationService",
    "TaskStateMachine",
]
