"""Assignment, worker document and client document request ORM models."""

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from workpaper.domain.enums import TaskStatus
from workpaper.infrastructure.persistence.database import Base
from workpaper.infrastructure.persistence.models.mixins import (
    CuidMixin,
    MultiTenantModel,
    VersionedMixin,
    values_check,
)
from workpaper.shared.utils.datetime import utc_now


class Assignment(MultiTenantModel, VersionedMixin, Base):
    """One submission attempt. Table: assignment.

    UNIQUE(task_id, sequence) keeps exactly one latest assignment per task.
    """

    __tablename__ = "assignment"

    task_id: Mapped[str] = mapped_column(
        String, ForeignKey("task.id", ondelete="CASCADE"), nullable=False
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    worker_id: Mapped[str] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    rejection_comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    client_comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    client_replied_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    approval_level: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    status: Mapped[str] = mapped_column(String(32), nullable=False)

    documents: Mapped[list["Document"]] = relationship(
        order_by="Document.uploaded_at", lazy="raise"
    )
    client_document_requests: Mapped[list["ClientDocumentRequest"]] = relationship(
        order_by="ClientDocumentRequest.created_at", lazy="raise"
    )

    __table_args__ = (
        UniqueConstraint("task_id", "sequence", name="uq_assignment_task_sequence"),
        values_check("status", TaskStatus, "assignment_status_check"),
        CheckConstraint(
            "(client_replied_at IS NULL) = (client_comment IS NULL)",
            name="assignment_client_reply_check",
        ),
    )


class Document(CuidMixin, Base):
    """File uploaded by a worker with a submission. Table: document. Never updated."""

    __tablename__ = "document"

    assignment_id: Mapped[str] = mapped_column(
        String, ForeignKey("assignment.id", ondelete="CASCADE"), nullable=False, index=True
    )
    label: Mapped[str] = mapped_column(String(255), nullable=False)
    file_path: Mapped[str] = mapped_column(String(1024), nullable=False)
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, server_default=func.now(), nullable=False
    )


class ClientDocumentRequest(CuidMixin, Base):
    """Document requested from the client. Table: client_document_request.

    file_path and uploaded_at are both null (unfulfilled) or both set.
    """

    __tablename__ = "client_document_request"

    assignment_id: Mapped[str] = mapped_column(
        String, ForeignKey("assignment.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    file_path: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    uploaded_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, server_default=func.now(), nullable=False
    )

    __table_args__ = (
        CheckConstraint(
            "(file_path IS NULL) = (uploaded_at IS NULL)",
            name="client_document_request_fulfillment_check",
        ),
    )
