"""DTOs for workflow commands and results (no dependency on ORM)."""

from __future__ import annotations

from dataclasses import dataclass, field

from workpaper.domain.entities import AssignmentEntity, TaskEntity


@dataclass(frozen=True)
class UploadedFile:
    """File already stored by the blob store; only the path is kept."""

    label: str
    file_path: str


@dataclass(frozen=True)
class DocumentRequestInput:
    """Named document to request from the client."""

    name: str
    description: str | None = None


@dataclass(frozen=True)
class ClientUpload:
    """Client file answering one document request."""

    request_id: str
    file_path: str


@dataclass(frozen=True)
class SubmitCommand:
    """Worker submission for a task."""

    notes: str | None = None
    files: list[UploadedFile] = field(default_factory=list)
    client_document_requests: list[DocumentRequestInput] = field(default_factory=list)


@dataclass(frozen=True)
class TransitionResult:
    """Task and latest assignment after a successful transition."""

    task: TaskEntity
    assignment: AssignmentEntity
