"""Activity log ORM model: one row per workflow transition."""

from typing import Any

from sqlalchemy import JSON, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from workpaper.infrastructure.persistence.database import Base
from workpaper.infrastructure.persistence.models.mixins import MultiTenantModel


class ActivityLog(MultiTenantModel, Base):
    """Table: activity_log. meta carries previous_status and new_status."""

    __tablename__ = "activity_log"

    project_id: Mapped[str] = mapped_column(
        String, ForeignKey("project.id", ondelete="CASCADE"), nullable=False
    )
    task_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("task.id", ondelete="SET NULL"), nullable=True, index=True
    )
    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False
    )
    action: Mapped[str] = mapped_column(String(64), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    meta: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    __table_args__ = (
        Index("ix_activity_log_project_created", "tenant_id", "project_id", "created_at"),
    )
