"""Document request ledger: client document requests and their one-shot fulfillment.

Fulfillment is monotonic (Unfulfilled -> Fulfilled). The repository applies
it as a single conditional write so two concurrent uploads for the same
request cannot both succeed; the loser gets InvalidStateException.
"""

from __future__ import annotations

import dataclasses
import logging

from workpaper.application.dtos.actor import ActorContext
from workpaper.application.dtos.workflow import DocumentRequestInput
from workpaper.application.interfaces.repositories import (
    IAssignmentRepository,
    IDocumentRequestRepository,
    IProjectRepository,
    ITaskRepository,
)
from workpaper.application.interfaces.services import INotificationDispatcher
from workpaper.application.services.notification_dispatcher import dispatch_best_effort
from workpaper.application.services.task_access import TaskAccessService
from workpaper.domain.entities import (
    AssignmentEntity,
    ClientDocumentRequestEntity,
    Fulfilled,
    TaskEntity,
)
from workpaper.domain.enums import ActorRole, ClientInteract, TaskStatus, TeamRole
from workpaper.domain.exceptions import (
    AuthorizationException,
    InvalidStateException,
    ProjectNotActiveException,
    ResourceNotFoundException,
    ValidationException,
)
from workpaper.domain.notifications import ClientDocumentsRequested, TaskRef
from workpaper.shared.utils.datetime import utc_now

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = 255

# Assignment states in which the client may still upload.
_OPEN_FOR_CLIENT = frozenset({TaskStatus.SUBMITTED_TO_CLIENT, TaskStatus.CLIENT_REPLY})


def validate_document_requests(
    items: list[DocumentRequestInput],
) -> list[DocumentRequestInput]:
    """Return items with trimmed names/descriptions; blank name raises ValidationException."""
    cleaned: list[DocumentRequestInput] = []
    for item in items:
        name = (item.name or "").strip()
        if not name:
            raise ValidationException(
                "Client document name must not be blank", field="name"
            )
        if len(name) > NAME_MAX_LENGTH:
            raise ValidationException(
                f"Client document name must be at most {NAME_MAX_LENGTH} characters",
                field="name",
            )
        description = (item.description or "").strip() or None
        cleaned.append(DocumentRequestInput(name=name, description=description))
    return cleaned


class DocumentRequestLedger:
    """Request, fulfill and check client documents on an assignment."""

    def __init__(
        self,
        request_repo: IDocumentRequestRepository,
        assignment_repo: IAssignmentRepository,
        task_repo: ITaskRepository,
        project_repo: IProjectRepository,
        access: TaskAccessService,
        dispatcher: INotificationDispatcher | None = None,
    ) -> None:
        self.request_repo = request_repo
        self.assignment_repo = assignment_repo
        self.task_repo = task_repo
        self.project_repo = project_repo
        self.access = access
        self.dispatcher = dispatcher

    async def request_documents(
        self,
        actor: ActorContext,
        assignment_id: str,
        items: list[DocumentRequestInput],
    ) -> list[ClientDocumentRequestEntity]:
        """Create unfulfilled requests on the task's latest assignment.

        Clients are notified when the assignment is already waiting on them.
        """
        cleaned = validate_document_requests(items)
        if not cleaned:
            raise ValidationException(
                "At least one client document is required", field="items"
            )
        if actor.role == ActorRole.CLIENT:
            raise AuthorizationException("client_document_request", "create")

        assignment, task, project_name = await self._load_latest(actor, assignment_id)
        if task.client_interact != ClientInteract.UPLOAD:
            raise ValidationException(
                "Client documents can only be requested on upload tasks",
                field="items",
            )
        if assignment.status.is_terminal_approved:
            raise InvalidStateException(
                "Cannot request documents on a finished submission",
                current_state=assignment.status.value,
                action="request_documents",
            )
        if actor.role == ActorRole.WORKER:
            await self.access.require_worker(actor, task)
        else:
            await self.access.require_approver(
                actor, task, assignment.approval_level, "request_documents"
            )

        created = await self.request_repo.add(actor.tenant_id, assignment.id, cleaned)
        logger.info(
            "Requested %d client document(s) on assignment %s", len(created), assignment.id
        )
        if assignment.status in _OPEN_FOR_CLIENT and self.dispatcher is not None:
            clients = await self.access.clients_for(task)
            await dispatch_best_effort(
                self.dispatcher,
                actor.tenant_id,
                ClientDocumentsRequested(
                    target_user_ids=tuple(clients),
                    task=TaskRef(task.id, task.name, task.project_id, project_name),
                    document_names=tuple(r.name for r in created),
                ),
            )
        return created

    async def fulfill(
        self, actor: ActorContext, request_id: str, file_path: str
    ) -> ClientDocumentRequestEntity:
        """Attach the client's file to a request (one-shot)."""
        path = (file_path or "").strip()
        if not path:
            raise ValidationException("file_path must not be blank", field="file_path")
        if actor.role not in (ActorRole.CLIENT, ActorRole.ADMIN):
            raise AuthorizationException("client_document_request", "fulfill")

        request = await self.request_repo.get(actor.tenant_id, request_id)
        if request is None:
            raise ResourceNotFoundException("client_document_request", request_id)
        assignment, task, _ = await self._load_latest(actor, request.assignment_id)
        if not actor.is_admin:
            team_role = await self.project_repo.get_member_role(
                task.project_id, actor.user_id
            )
            if team_role != TeamRole.CLIENT:
                raise AuthorizationException("client_document_request", "fulfill")
        if assignment.status not in _OPEN_FOR_CLIENT:
            raise InvalidStateException(
                "Documents can only be uploaded while the task is with the client",
                current_state=assignment.status.value,
                action="fulfill",
            )
        return await self.attach(request, path)

    async def attach(
        self, request: ClientDocumentRequestEntity, file_path: str
    ) -> ClientDocumentRequestEntity:
        """Conditionally set file_path/uploaded_at; InvalidStateException if already fulfilled."""
        if request.is_fulfilled:
            raise InvalidStateException(
                f"Client document '{request.name}' is already fulfilled",
                action="fulfill",
            )
        uploaded_at = utc_now()
        if not await self.request_repo.fulfill(
            request.id, file_path=file_path, uploaded_at=uploaded_at
        ):
            raise InvalidStateException(
                f"Client document '{request.name}' is already fulfilled",
                action="fulfill",
            )
        return dataclasses.replace(
            request, state=Fulfilled(file_path=file_path, uploaded_at=uploaded_at)
        )

    async def all_fulfilled(self, tenant_id: str, assignment_id: str) -> bool:
        """True when every request on the assignment has a file (true for none)."""
        assignment = await self.assignment_repo.get(tenant_id, assignment_id)
        if assignment is None:
            raise ResourceNotFoundException("assignment", assignment_id)
        requests = await self.request_repo.list_for_assignment(assignment_id)
        return all(r.is_fulfilled for r in requests)

    async def _load_latest(
        self, actor: ActorContext, assignment_id: str
    ) -> tuple[AssignmentEntity, TaskEntity, str]:
        """Load assignment, lock its task, check project and that it is the latest."""
        assignment = await self.assignment_repo.get(actor.tenant_id, assignment_id)
        if assignment is None:
            raise ResourceNotFoundException("assignment", assignment_id)
        task = await self.task_repo.get(
            actor.tenant_id, assignment.task_id, for_update=True
        )
        if task is None:
            raise ResourceNotFoundException("task", assignment.task_id)
        project = await self.access.get_visible_project(actor, task.project_id)
        if not project.is_active():
            raise ProjectNotActiveException(project.id, project.status.value)
        latest = await self.assignment_repo.get_latest(task.id)
        if latest is None or latest.id != assignment.id:
            raise InvalidStateException(
                "Only the latest submission of a task can be changed",
                current_state=assignment.status.value,
            )
        return latest, task, project.name
