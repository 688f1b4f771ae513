"""Notification API schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from workpaper.domain.enums import NotificationType


class NotificationResponse(BaseModel):
    """Persisted notification; read_at is null until read."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    type: NotificationType
    title: str
    message: str
    url: str | None = None
    task_id: str | None = None
    project_id: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)
    is_read: bool
    read_at: datetime | None = None
    created_at: datetime


class NotificationListResponse(BaseModel):
    """Response for GET /notifications (newest first)."""

    model_config = ConfigDict(from_attributes=True)

    items: list[NotificationResponse]
    unread_count: int


class UnreadCountResponse(BaseModel):
    unread_count: int


class MarkedCountResponse(BaseModel):
    """Number of notifications that changed from unread to read."""

    updated: int


class ReadByContextRequest(BaseModel):
    """Mark unread notifications read for a task or project (at least one), optionally by type."""

    type: NotificationType | None = Field(default=None)
    task_id: str | None = Field(default=None)
    project_id: str | None = Field(default=None)
