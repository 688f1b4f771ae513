"""Task workflow API schemas: commands, assignments and document requests."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from workpaper.application.dtos import (
    ClientUpload,
    DocumentRequestInput,
    SubmitCommand,
    UploadedFile,
)
from workpaper.domain.enums import CompletionStatus, TaskStatus


class UploadedFileRequest(BaseModel):
    """File already written to blob storage; only its path is sent."""

    label: str = Field(..., min_length=1, max_length=255)
    file_path: str = Field(..., min_length=1, max_length=1024)


class DocumentRequestItem(BaseModel):
    """Document the client is asked to provide."""

    name: str = Field(..., description="Document name (1-255 chars after trim)")
    description: str | None = Field(default=None)

    def to_input(self) -> DocumentRequestInput:
        return DocumentRequestInput(name=self.name, description=self.description)


class SubmitRequest(BaseModel):
    """Request body for POST /tasks/{id}/submit."""

    notes: str | None = Field(default=None, description="Worker notes")
    files: list[UploadedFileRequest] = Field(default_factory=list)
    client_document_requests: list[DocumentRequestItem] = Field(
        default_factory=list,
        description="Required when the task takes client uploads",
    )

    def to_command(self) -> SubmitCommand:
        return SubmitCommand(
            notes=self.notes,
            files=[UploadedFile(label=f.label, file_path=f.file_path) for f in self.files],
            client_document_requests=[r.to_input() for r in self.client_document_requests],
        )


class CommentRequest(BaseModel):
    """Request body for reject and request-reupload. The comment is required."""

    comment: str | None = Field(default=None, description="Reason shown to the worker/client")


class ClientUploadRequest(BaseModel):
    request_id: str = Field(..., description="Client document request being answered")
    file_path: str = Field(..., max_length=1024)


class ClientReplyRequest(BaseModel):
    """Request body for POST /tasks/{id}/client-reply."""

    comment: str | None = Field(default=None)
    uploads: list[ClientUploadRequest] = Field(default_factory=list)

    def to_uploads(self) -> list[ClientUpload]:
        return [ClientUpload(request_id=u.request_id, file_path=u.file_path) for u in self.uploads]


class DocumentRequestsCreate(BaseModel):
    """Request body for POST /assignments/{id}/document-requests."""

    items: list[DocumentRequestItem] = Field(..., min_length=1)


class FulfillRequest(BaseModel):
    """Request body for POST /document-requests/{id}/fulfill."""

    file_path: str = Field(..., max_length=1024)


class DocumentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    label: str
    file_path: str
    uploaded_at: datetime


class ClientDocumentRequestResponse(BaseModel):
    """Client document request; file_path and uploaded_at are set once fulfilled."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    assignment_id: str
    name: str
    description: str | None = None
    is_fulfilled: bool
    file_path: str | None = None
    uploaded_at: datetime | None = None


class AssignmentResponse(BaseModel):
    """One submission attempt, with its worker documents and client requests."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    task_id: str
    sequence: int
    worker_id: str
    status: TaskStatus
    approval_level: int
    notes: str | None = None
    rejection_comment: str | None = None
    client_comment: str | None = None
    client_replied_at: datetime | None = None
    created_at: datetime
    documents: list[DocumentResponse] = Field(default_factory=list)
    client_document_requests: list[ClientDocumentRequestResponse] = Field(
        default_factory=list
    )


class TaskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    working_step_id: str
    name: str
    status: TaskStatus
    completion_status: CompletionStatus
    due_at: datetime | None = None
    completed_at: datetime | None = None


class TransitionResponse(BaseModel):
    """Task and latest assignment after a workflow action."""

    model_config = ConfigDict(from_attributes=True)

    task: TaskResponse
    assignment: AssignmentResponse
