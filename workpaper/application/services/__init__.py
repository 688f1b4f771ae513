"""Application services shared by several use cases."""

from workpaper.application.services.notification_dispatcher import (
    NotificationDispatcher,
    dispatch_best_effort,
)
from workpaper.application.services.task_access import TaskAccessService

__all__ = ["NotificationDispatcher", "TaskAccessService", "dispatch_best_effort"]
