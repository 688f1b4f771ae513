"""Project, project membership and working step ORM models."""

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from workpaper.domain.enums import ProjectStatus, TeamRole
from workpaper.infrastructure.persistence.database import Base
from workpaper.infrastructure.persistence.models.mixins import (
    CuidMixin,
    MultiTenantModel,
    TimestampMixin,
    values_check,
)


class Project(MultiTenantModel, Base):
    """Client engagement. Table: project. Only 'In Progress' projects accept task changes."""

    __tablename__ = "project"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    client_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=ProjectStatus.IN_PROGRESS.value,
        server_default=ProjectStatus.IN_PROGRESS.value,
        index=True,
    )

    __table_args__ = (values_check("status", ProjectStatus, "project_status_check"),)


class ProjectMember(CuidMixin, TimestampMixin, Base):
    """User's team role in a project. Table: project_member."""

    __tablename__ = "project_member"

    project_id: Mapped[str] = mapped_column(
        String, ForeignKey("project.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    team_role: Mapped[str] = mapped_column(String(32), nullable=False)

    __table_args__ = (
        UniqueConstraint("project_id", "user_id", name="uq_project_member"),
        values_check("team_role", TeamRole, "project_member_team_role_check"),
    )


class WorkingStep(CuidMixin, TimestampMixin, Base):
    """Ordered phase of a project. Table: working_step."""

    __tablename__ = "working_step"

    project_id: Mapped[str] = mapped_column(
        String, ForeignKey("project.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    order: Mapped[int] = mapped_column(Integer, nullable=False)
    is_locked: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )

    __table_args__ = (
        UniqueConstraint("project_id", "order", name="uq_working_step_order"),
        Index("ix_working_step_project", "project_id", "order"),
    )
