"""Notification and activity log entities."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from workpaper.domain.enums import NotificationType


@dataclass(frozen=True)
class Unread:
    """Notification not yet read."""


@dataclass(frozen=True)
class Read:
    read_at: datetime


ReadState = Unread | Read


def read_state(read_at: datetime | None) -> ReadState:
    return Unread() if read_at is None else Read(read_at=read_at)


@dataclass
class NotificationEntity:
    """Persisted notification for one user. Only read_at ever changes."""

    id: str
    tenant_id: str
    user_id: str
    type: NotificationType
    title: str
    message: str
    url: str | None
    created_at: datetime
    task_id: str | None = None
    project_id: str | None = None
    data: dict[str, Any] = field(default_factory=dict)
    state: ReadState = field(default_factory=Unread)

    @property
    def is_read(self) -> bool:
        return isinstance(self.state, Read)

    @property
    def read_at(self) -> datetime | None:
        return self.state.read_at if isinstance(self.state, Read) else None


@dataclass
class ActivityEntity:
    """Activity log entry written on every workflow transition."""

    id: str
    tenant_id: str
    project_id: str
    task_id: str | None
    user_id: str
    action: str
    description: str
    meta: dict[str, Any]
    created_at: datetime
