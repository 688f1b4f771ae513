"""Task and task worker ORM models."""

from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from workpaper.domain.enums import ClientInteract, CompletionStatus, TaskStatus
from workpaper.infrastructure.persistence.database import Base
from workpaper.infrastructure.persistence.models.mixins import (
    CuidMixin,
    MultiTenantModel,
    TimestampMixin,
    values_check,
)


class Task(MultiTenantModel, Base):
    """Unit of work in a working step. Table: task.

    status, completion_status and completed_at are written only by the
    task state machine.
    """

    __tablename__ = "task"

    project_id: Mapped[str] = mapped_column(
        String, ForeignKey("project.id", ondelete="CASCADE"), nullable=False
    )
    working_step_id: Mapped[str] = mapped_column(
        String, ForeignKey("working_step.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    is_required: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=text("true")
    )
    client_interact: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=ClientInteract.READ_ONLY.value,
        server_default=ClientInteract.READ_ONLY.value,
    )
    multiple_files: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    approval_chain: Mapped[list[Any]] = mapped_column(
        JSON, nullable=False, default=list, server_default=text("'[]'")
    )
    due_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=TaskStatus.DRAFT.value,
        server_default=TaskStatus.DRAFT.value,
    )
    completion_status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=CompletionStatus.PENDING.value,
        server_default=CompletionStatus.PENDING.value,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        Index("ix_task_tenant_project", "tenant_id", "project_id"),
        Index("ix_task_project_status", "project_id", "status"),
        values_check("status", TaskStatus, "task_status_check"),
        values_check("completion_status", CompletionStatus, "task_completion_status_check"),
        values_check("client_interact", ClientInteract, "task_client_interact_check"),
    )


class TaskWorker(CuidMixin, TimestampMixin, Base):
    """Worker assigned to a task. Table: task_worker."""

    __tablename__ = "task_worker"

    task_id: Mapped[str] = mapped_column(
        String, ForeignKey("task.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False, index=True
    )

    __table_args__ = (UniqueConstraint("task_id", "user_id", name="uq_task_worker"),)
