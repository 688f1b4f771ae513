"""Notification ORM model. Rows are never deleted; only read_at changes."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from workpaper.domain.enums import NotificationType
from workpaper.infrastructure.persistence.database import Base
from workpaper.infrastructure.persistence.models.mixins import (
    MultiTenantModel,
    values_check,
)


class Notification(MultiTenantModel, Base):
    """Persisted notification for one user. Table: notification."""

    __tablename__ = "notification"

    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False
    )
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    task_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("task.id", ondelete="SET NULL"), nullable=True
    )
    project_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("project.id", ondelete="SET NULL"), nullable=True
    )
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_notification_user_created", "tenant_id", "user_id", "created_at"),
        Index("ix_notification_user_unread", "user_id", "read_at"),
        values_check("type", NotificationType, "notification_type_check"),
    )
