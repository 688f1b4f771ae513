"""Assignment store: the append-only log of submission attempts per task.

A task's assignments are ordered by sequence; the highest sequence is the
latest and the only one mutated in place (client reply, fulfillment,
status). Earlier assignments are history and never change.
"""

from __future__ import annotations

import logging

from workpaper.application.dtos.actor import ActorContext
from workpaper.application.dtos.workflow import (
    ClientUpload,
    DocumentRequestInput,
    SubmitCommand,
    UploadedFile,
)
from workpaper.application.interfaces.repositories import (
    IAssignmentRepository,
    ITaskRepository,
)
from workpaper.application.services.task_access import TaskAccessService
from workpaper.application.use_cases.documents import (
    DocumentRequestLedger,
    validate_document_requests,
)
from workpaper.domain.entities import AssignmentEntity, TaskEntity
from workpaper.domain.enums import ClientInteract, TaskStatus
from workpaper.domain.exceptions import (
    InvalidStateException,
    ResourceNotFoundException,
    ValidationException,
)
from workpaper.shared.utils.datetime import utc_now

logger = logging.getLogger(__name__)

REUPLOAD_NOTES_PREFIX = "Re-upload requested\nComment:\n"


def validate_submission(
    task: TaskEntity, command: SubmitCommand
) -> tuple[str | None, list[UploadedFile], list[DocumentRequestInput]]:
    """Check a worker submission against the task's configuration.

    Returns (notes, files, requests) normalized. Raises ValidationException
    for an empty submission, an upload task without client document
    requests, requests on a non-upload task, or several files on a
    single-file task.
    """
    notes = (command.notes or "").strip() or None
    files = list(command.files)
    for f in files:
        if not (f.file_path or "").strip():
            raise ValidationException("Uploaded file path must not be blank", field="files")
    requests = validate_document_requests(command.client_document_requests)

    if task.client_interact == ClientInteract.UPLOAD and not requests:
        raise ValidationException(
            "Tasks with client uploads must request at least one client document",
            field="client_document_requests",
        )
    if requests and task.client_interact != ClientInteract.UPLOAD:
        raise ValidationException(
            "Client documents can only be requested on upload tasks",
            field="client_document_requests",
        )
    if not (notes or files or requests):
        raise ValidationException(
            "A submission needs notes, files or client document requests",
            field="notes",
        )
    if len(files) > 1 and not task.multiple_files:
        raise ValidationException("This task accepts a single file", field="files")
    return notes, files, requests


class AssignmentStore:
    """Create assignments, record client replies and read history."""

    def __init__(
        self,
        assignment_repo: IAssignmentRepository,
        task_repo: ITaskRepository,
        ledger: DocumentRequestLedger,
        access: TaskAccessService,
    ) -> None:
        self.assignment_repo = assignment_repo
        self.task_repo = task_repo
        self.ledger = ledger
        self.access = access

    async def create_assignment(
        self,
        task: TaskEntity,
        worker_id: str,
        command: SubmitCommand,
        previous: AssignmentEntity | None,
    ) -> AssignmentEntity:
        """Append a Submitted assignment (approval level 0) after previous."""
        notes, files, requests = validate_submission(task, command)
        assignment = await self.assignment_repo.append(
            task.tenant_id,
            task.id,
            sequence=_next_sequence(previous),
            worker_id=worker_id,
            notes=notes,
            status=TaskStatus.SUBMITTED,
            approval_level=0,
            documents=files,
            requests=requests,
        )
        logger.info(
            "Created assignment %s (sequence %d) for task %s",
            assignment.id,
            assignment.sequence,
            task.id,
        )
        return assignment

    async def create_reupload(
        self, task: TaskEntity, previous: AssignmentEntity, comment: str
    ) -> AssignmentEntity:
        """Append a new assignment that sends the task back to the client.

        Worker documents keep their paths; client document requests are
        copied unfulfilled. previous stays untouched in history.
        """
        return await self.assignment_repo.append(
            task.tenant_id,
            task.id,
            sequence=_next_sequence(previous),
            worker_id=previous.worker_id,
            notes=f"{REUPLOAD_NOTES_PREFIX}{comment}",
            status=TaskStatus.SUBMITTED_TO_CLIENT,
            approval_level=previous.approval_level,
            documents=[UploadedFile(d.label, d.file_path) for d in previous.documents],
            requests=[
                DocumentRequestInput(r.name, r.description)
                for r in previous.client_document_requests
            ],
        )

    async def append_client_reply(
        self,
        task: TaskEntity,
        assignment: AssignmentEntity,
        comment: str | None,
        uploads: list[ClientUpload],
    ) -> AssignmentEntity:
        """Record the client's one-shot reply on the latest assignment.

        Uploads fulfill the assignment's open requests through the ledger.
        """
        text = (comment or "").strip()
        if task.client_interact == ClientInteract.READ_ONLY:
            raise InvalidStateException(
                "This task does not accept client replies",
                current_state=assignment.status.value,
                action="client_reply",
            )
        if assignment.has_client_reply:
            raise InvalidStateException(
                "The client has already replied to this submission",
                current_state=assignment.status.value,
                action="client_reply",
            )
        if assignment.status != TaskStatus.SUBMITTED_TO_CLIENT:
            raise InvalidStateException(
                f"Cannot reply to a submission in status '{assignment.status.value}'",
                current_state=assignment.status.value,
                action="client_reply",
            )
        if uploads and task.client_interact != ClientInteract.UPLOAD:
            raise ValidationException(
                "This task accepts comments only", field="uploads"
            )
        if not text and not uploads:
            raise ValidationException(
                "A reply needs a comment or uploaded documents", field="comment"
            )
        by_id = {r.id: r for r in assignment.client_document_requests}
        for upload in uploads:
            if upload.request_id not in by_id:
                raise ResourceNotFoundException(
                    "client_document_request", upload.request_id
                )
            if not (upload.file_path or "").strip():
                raise ValidationException(
                    "Uploaded file path must not be blank", field="uploads"
                )

        if not await self.assignment_repo.record_client_reply(
            assignment.id, comment=text, replied_at=utc_now()
        ):
            raise InvalidStateException(
                "The client has already replied to this submission",
                current_state=assignment.status.value,
                action="client_reply",
            )
        for upload in uploads:
            await self.ledger.attach(by_id[upload.request_id], upload.file_path.strip())

        updated = await self.assignment_repo.get(assignment.tenant_id, assignment.id)
        if updated is None:
            raise ResourceNotFoundException("assignment", assignment.id)
        return updated

    async def get_history(
        self, actor: ActorContext, task_id: str
    ) -> list[AssignmentEntity]:
        """All assignments of a visible task, most recent first."""
        task = await self.task_repo.get(actor.tenant_id, task_id)
        if task is None:
            raise ResourceNotFoundException("task", task_id)
        await self.access.get_visible_project(actor, task.project_id)
        return await self.assignment_repo.list_for_task(task.id)


def _next_sequence(previous: AssignmentEntity | None) -> int:
    return previous.sequence + 1 if previous else 1
