"""Dashboard API schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ActivityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    task_id: str | None = None
    user_id: str
    action: str
    description: str
    meta: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime


class DashboardSummaryResponse(BaseModel):
    """Response for GET /dashboard/summary. Clients poll again after poll_interval_seconds."""

    model_config = ConfigDict(from_attributes=True)

    pending_approvals: int = Field(..., description="Items awaiting the caller's action")
    active_assignments: int
    completed_today: int
    overdue_tasks: int
    recent_activities: list[ActivityResponse]
    projects_count: int
    unread_notifications: int
    last_updated: datetime
    poll_interval_seconds: int
