"""Initial schema: tenants, users, projects, tasks, assignments, notifications

Revision ID: 3f2a9c1d7b10
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f2a9c1d7b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def _tenant_fk() -> sa.ForeignKeyConstraint:
    return sa.ForeignKeyConstraint(["tenant_id"], ["tenant.id"], ondelete="CASCADE")


def upgrade() -> None:
    """Create workflow schema."""
    op.create_table(
        "tenant",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("code", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_tenant_code"), "tenant", ["code"], unique=True)

    op.create_table(
        "app_user",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column("username", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("role", sa.String(length=16), nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "role IN ('admin', 'approver', 'worker', 'client')", name="app_user_role_check"
        ),
        _tenant_fk(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tenant_id", "username", name="uq_tenant_username"),
        sa.UniqueConstraint("tenant_id", "email", name="uq_tenant_email"),
    )
    op.create_index(op.f("ix_app_user_tenant_id"), "app_user", ["tenant_id"], unique=False)
    op.create_index(op.f("ix_app_user_role"), "app_user", ["role"], unique=False)

    op.create_table(
        "project",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("client_name", sa.String(length=255), nullable=True),
        sa.Column(
            "status", sa.String(length=32), server_default="In Progress", nullable=False
        ),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('In Progress', 'Completed', 'Suspended', 'Canceled')",
            name="project_status_check",
        ),
        _tenant_fk(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_project_tenant_id"), "project", ["tenant_id"], unique=False)
    op.create_index(op.f("ix_project_status"), "project", ["status"], unique=False)

    op.create_table(
        "project_member",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("project_id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("team_role", sa.String(length=32), nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "team_role IN ('worker', 'team_leader', 'manager', 'supervisor', 'partner', 'client')",
            name="project_member_team_role_check",
        ),
        sa.ForeignKeyConstraint(["project_id"], ["project.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["app_user.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("project_id", "user_id", name="uq_project_member"),
    )
    op.create_index(
        op.f("ix_project_member_project_id"), "project_member", ["project_id"], unique=False
    )
    op.create_index(
        op.f("ix_project_member_user_id"), "project_member", ["user_id"], unique=False
    )

    op.create_table(
        "working_step",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("project_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False),
        sa.Column("is_locked", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["project_id"], ["project.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("project_id", "order", name="uq_working_step_order"),
    )
    op.create_index(
        "ix_working_step_project", "working_step", ["project_id", "order"], unique=False
    )

    op.create_table(
        "task",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column("project_id", sa.String(), nullable=False),
        sa.Column("working_step_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("order", sa.Integer(), server_default="0", nullable=False),
        sa.Column("is_required", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        sa.Column(
            "client_interact", sa.String(length=16), server_default="read_only", nullable=False
        ),
        sa.Column(
            "multiple_files", sa.Boolean(), server_default=sa.text("false"), nullable=False
        ),
        sa.Column("approval_chain", sa.JSON(), server_default=sa.text("'[]'"), nullable=False),
        sa.Column("due_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(length=32), server_default="Draft", nullable=False),
        sa.Column(
            "completion_status", sa.String(length=16), server_default="pending", nullable=False
        ),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('Draft', 'Submitted', 'Under Review', 'Approved', "
            "'Returned for Revision', 'Submitted to Client', 'Client Reply', 'Completed')",
            name="task_status_check",
        ),
        sa.CheckConstraint(
            "completion_status IN ('pending', 'in_progress', 'completed')",
            name="task_completion_status_check",
        ),
        sa.CheckConstraint(
            "client_interact IN ('read_only', 'comment', 'upload')",
            name="task_client_interact_check",
        ),
        _tenant_fk(),
        sa.ForeignKeyConstraint(["project_id"], ["project.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["working_step_id"], ["working_step.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_task_tenant_id"), "task", ["tenant_id"], unique=False)
    op.create_index(op.f("ix_task_working_step_id"), "task", ["working_step_id"], unique=False)
    op.create_index("ix_task_tenant_project", "task", ["tenant_id", "project_id"], unique=False)
    op.create_index("ix_task_project_status", "task", ["project_id", "status"], unique=False)

    op.create_table(
        "task_worker",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("task_id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["task_id"], ["task.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["app_user.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("task_id", "user_id", name="uq_task_worker"),
    )
    op.create_index(op.f("ix_task_worker_task_id"), "task_worker", ["task_id"], unique=False)
    op.create_index(op.f("ix_task_worker_user_id"), "task_worker", ["user_id"], unique=False)

    op.create_table(
        "assignment",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column("task_id", sa.String(), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("worker_id", sa.String(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("rejection_comment", sa.Text(), nullable=True),
        sa.Column("client_comment", sa.Text(), nullable=True),
        sa.Column("client_replied_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("approval_level", sa.Integer(), server_default="0", nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("version", sa.Integer(), server_default="1", nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('Draft', 'Submitted', 'Under Review', 'Approved', "
            "'Returned for Revision', 'Submitted to Client', 'Client Reply', 'Completed')",
            name="assignment_status_check",
        ),
        sa.CheckConstraint(
            "(client_replied_at IS NULL) = (client_comment IS NULL)",
            name="assignment_client_reply_check",
        ),
        _tenant_fk(),
        sa.ForeignKeyConstraint(["task_id"], ["task.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["worker_id"], ["app_user.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("task_id", "sequence", name="uq_assignment_task_sequence"),
    )
    op.create_index(op.f("ix_assignment_tenant_id"), "assignment", ["tenant_id"], unique=False)
    op.create_index(op.f("ix_assignment_worker_id"), "assignment", ["worker_id"], unique=False)

    op.create_table(
        "document",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("assignment_id", sa.String(), nullable=False),
        sa.Column("label", sa.String(length=255), nullable=False),
        sa.Column("file_path", sa.String(length=1024), nullable=False),
        sa.Column(
            "uploaded_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["assignment_id"], ["assignment.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_document_assignment_id"), "document", ["assignment_id"], unique=False
    )

    op.create_table(
        "client_document_request",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("assignment_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("file_path", sa.String(length=1024), nullable=True),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.CheckConstraint(
            "(file_path IS NULL) = (uploaded_at IS NULL)",
            name="client_document_request_fulfillment_check",
        ),
        sa.ForeignKeyConstraint(["assignment_id"], ["assignment.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_client_document_request_assignment_id"),
        "client_document_request",
        ["assignment_id"],
        unique=False,
    )

    op.create_table(
        "notification",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("url", sa.String(length=1024), nullable=True),
        sa.Column("task_id", sa.String(), nullable=True),
        sa.Column("project_id", sa.String(), nullable=True),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "type IN ('approval', 'assignment', 'activity', 'client_task', 'document_request')",
            name="notification_type_check",
        ),
        _tenant_fk(),
        sa.ForeignKeyConstraint(["user_id"], ["app_user.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["task_id"], ["task.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["project_id"], ["project.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_notification_tenant_id"), "notification", ["tenant_id"], unique=False
    )
    op.create_index(
        "ix_notification_user_created",
        "notification",
        ["tenant_id", "user_id", "created_at"],
        unique=False,
    )
    op.create_index(
        "ix_notification_user_unread", "notification", ["user_id", "read_at"], unique=False
    )

    op.create_table(
        "activity_log",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column("project_id", sa.String(), nullable=False),
        sa.Column("task_id", sa.String(), nullable=True),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("action", sa.String(length=64), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("meta", sa.JSON(), nullable=False),
        *_timestamps(),
        _tenant_fk(),
        sa.ForeignKeyConstraint(["project_id"], ["project.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["task_id"], ["task.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["user_id"], ["app_user.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_activity_log_tenant_id"), "activity_log", ["tenant_id"], unique=False
    )
    op.create_index(op.f("ix_activity_log_task_id"), "activity_log", ["task_id"], unique=False)
    op.create_index(
        "ix_activity_log_project_created",
        "activity_log",
        ["tenant_id", "project_id", "created_at"],
        unique=False,
    )


def downgrade() -> None:
    """Drop workflow schema."""
    op.drop_index("ix_activity_log_project_created", table_name="activity_log")
    op.drop_index(op.f("ix_activity_log_task_id"), table_name="activity_log")
    op.drop_index(op.f("ix_activity_log_tenant_id"), table_name="activity_log")
    op.drop_table("activity_log")

    op.drop_index("ix_notification_user_unread", table_name="notification")
    op.drop_index("ix_notification_user_created", table_name="notification")
    op.drop_index(op.f("ix_notification_tenant_id"), table_name="notification")
    op.drop_table("notification")

    op.drop_index(
        op.f("ix_client_document_request_assignment_id"), table_name="client_document_request"
    )
    op.drop_table("client_document_request")

    op.drop_index(op.f("ix_document_assignment_id"), table_name="document")
    op.drop_table("document")

    op.drop_index(op.f("ix_assignment_worker_id"), table_name="assignment")
    op.drop_index(op.f("ix_assignment_tenant_id"), table_name="assignment")
    op.drop_table("assignment")

    op.drop_index(op.f("ix_task_worker_user_id"), table_name="task_worker")
    op.drop_index(op.f("ix_task_worker_task_id"), table_name="task_worker")
    op.drop_table("task_worker")

    op.drop_index("ix_task_project_status", table_name="task")
    op.drop_index("ix_task_tenant_project", table_name="task")
    op.drop_index(op.f("ix_task_working_step_id"), table_name="task")
    op.drop_index(op.f("ix_task_tenant_id"), table_name="task")
    op.drop_table("task")

    op.drop_index("ix_working_step_project", table_name="working_step")
    op.drop_table("working_step")

    op.drop_index(op.f("ix_project_member_user_id"), table_name="project_member")
    op.drop_index(op.f("ix_project_member_project_id"), table_name="project_member")
    op.drop_table("project_member")

    op.drop_index(op.f("ix_project_status"), table_name="project")
    op.drop_index(op.f("ix_project_tenant_id"), table_name="project")
    op.drop_table("project")

    op.drop_index(op.f("ix_app_user_role"), table_name="app_user")
    op.drop_index(op.f("ix_app_user_tenant_id"), table_name="app_user")
    op.drop_table("app_user")

    op.drop_index(op.f("ix_tenant_code"), table_name="tenant")
    op.drop_table("tenant")
