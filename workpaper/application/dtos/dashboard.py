"""DTOs for the dashboard read model and notification queries."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from workpaper.domain.entities import ActivityEntity, NotificationEntity


@dataclass(frozen=True)
class PendingApproval:
    """Task waiting on an approval level (from the latest assignment)."""

    task_id: str
    project_id: str
    approval_chain: list[str]
    approval_level: int


@dataclass(frozen=True)
class DashboardSummary:
    """Point-in-time counts for polling clients."""

    pending_approvals: int
    active_assignments: int
    completed_today: int
    overdue_tasks: int
    recent_activities: list[ActivityEntity]
    projects_count: int
    unread_notifications: int
    last_updated: datetime
    poll_interval_seconds: int


@dataclass(frozen=True)
class NotificationPage:
    """Notifications for a user, newest first, with the unread count."""

    items: list[NotificationEntity]
    unread_count: int
