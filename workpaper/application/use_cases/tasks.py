"""Task state machine: submit, approve, reject, client reply, accept, re-upload.

Every operation runs inside one database transaction (opened by the
caller's session dependency). The task row is locked first; the task's
status and its latest assignment's status always move together, and both
writes are conditional so a concurrent transition loses with
InvalidStateException instead of double-applying.

Notifications are dispatched after the state change. Dispatch failures are
logged and never roll the transition back.
"""

from __future__ import annotations

import dataclasses
import logging

from workpaper.application.dtos.actor import ActorContext
from workpaper.application.dtos.workflow import (
    ClientUpload,
    SubmitCommand,
    TransitionResult,
)
from workpaper.application.interfaces.repositories import (
    IActivityLogRepository,
    IAssignmentRepository,
    IProjectRepository,
    ITaskRepository,
)
from workpaper.application.interfaces.services import INotificationDispatcher
from workpaper.application.services.notification_dispatcher import dispatch_best_effort
from workpaper.application.services.task_access import TaskAccessService
from workpaper.application.use_cases.assignments import AssignmentStore
from workpaper.application.use_cases.documents import DocumentRequestLedger
from workpaper.domain.entities import AssignmentEntity, ProjectEntity, TaskEntity
from workpaper.domain.enums import (
    CompletionStatus,
    TaskStatus,
    WorkerAction,
    WorkflowAction,
)
from workpaper.domain.exceptions import (
    InvalidStateException,
    ProjectNotActiveException,
    ResourceNotFoundException,
    ValidationException,
)
from workpaper.domain.notifications import (
    ActivityNotice,
    ApprovalRequested,
    ClientTaskUpdate,
    NotificationEvent,
    TaskRef,
    WorkerTaskUpdate,
)
from workpaper.domain.workflow import (
    require_role,
    require_transition,
    resolve_approval,
)
from workpaper.shared.telemetry import get_tracer
from workpaper.shared.utils.datetime import utc_now

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)

REUPLOAD_COMMENT_MAX_LENGTH = 1000


def _ref(task: TaskEntity, project: ProjectEntity) -> TaskRef:
    return TaskRef(task.id, task.name, project.id, project.name)


def _required_comment(comment: str | None, *, max_length: int | None = None) -> str:
    text = (comment or "").strip()
    if not text:
        raise ValidationException("A comment is required", field="comment")
    if max_length is not None and len(text) > max_length:
        raise ValidationException(
            f"Comment must be at most {max_length} characters", field="comment"
        )
    return text


class TaskStateMachine:
    """Drives a task through the approval workflow on behalf of an actor."""

    def __init__(
        self,
        task_repo: ITaskRepository,
        assignment_repo: IAssignmentRepository,
        project_repo: IProjectRepository,
        activity_repo: IActivityLogRepository,
        access: TaskAccessService,
        store: AssignmentStore,
        ledger: DocumentRequestLedger,
        dispatcher: INotificationDispatcher | None = None,
    ) -> None:
        self.task_repo = task_repo
        self.assignment_repo = assignment_repo
        self.project_repo = project_repo
        self.activity_repo = activity_repo
        self.access = access
        self.store = store
        self.ledger = ledger
        self.dispatcher = dispatcher

    async def submit(
        self, actor: ActorContext, task_id: str, command: SubmitCommand
    ) -> TransitionResult:
        """Worker submits (or resubmits) a task; level-0 approvers are notified.

        Tasks in a locked working step can only be submitted by admins.
        """
        action = WorkflowAction.SUBMIT
        require_role(action, actor.role)
        task, project = await self._load(actor, task_id)
        await self.access.require_worker(actor, task)
        require_transition(action, actor.role, task.status)

        step = await self.project_repo.get_step(task.working_step_id)
        if step is not None and step.is_locked and not actor.is_admin:
            raise InvalidStateException(
                f"Working step '{step.name}' is locked",
                current_state=task.status.value,
                action=action.value,
            )

        previous = await self.assignment_repo.get_latest(task.id)
        assignment = await self.store.create_assignment(
            task, actor.user_id, command, previous
        )
        task = await self._move_task(actor, task, TaskStatus.SUBMITTED, action)

        approvers = await self.access.approvers_for(task, 0)
        await self._notify(
            actor.tenant_id,
            ApprovalRequested(
                target_user_ids=tuple(approvers),
                task=_ref(task, project),
                level=0,
                role=task.role_for_level(0),
            ),
        )
        return TransitionResult(task=task, assignment=assignment)

    async def approve(self, actor: ActorContext, task_id: str) -> TransitionResult:
        """Approve at the current level.

        Non-final levels move to Under Review and notify the next level. The
        final level goes to the client when the task takes client input and
        the submission requested client documents; otherwise the task is
        Approved and completed.
        """
        action = WorkflowAction.APPROVE
        require_role(action, actor.role)
        task, project = await self._load(actor, task_id)
        require_transition(action, actor.role, task.status)
        latest = await self._latest(task)
        await self.access.require_approver(
            actor, task, latest.approval_level, action.value
        )

        status, level = resolve_approval(task, latest)
        assignment = await self._transition_assignment(
            latest, status, approval_level=level
        )
        task = await self._move_task(actor, task, status, action)

        ref = _ref(task, project)
        workers = tuple(await self.access.workers_for(task))
        events: list[NotificationEvent]
        if status == TaskStatus.UNDER_REVIEW:
            approvers = await self.access.approvers_for(task, level)
            events = [
                ApprovalRequested(
                    target_user_ids=tuple(approvers),
                    task=ref,
                    level=level,
                    role=task.role_for_level(level),
                ),
                WorkerTaskUpdate(
                    target_user_ids=workers,
                    task=ref,
                    action=WorkerAction.COMPANY_APPROVED,
                ),
            ]
        elif status == TaskStatus.SUBMITTED_TO_CLIENT:
            clients = await self.access.clients_for(task)
            events = [
                ClientTaskUpdate(
                    target_user_ids=tuple(clients), task=ref, status=status
                ),
                WorkerTaskUpdate(
                    target_user_ids=workers,
                    task=ref,
                    action=WorkerAction.COMPANY_APPROVED,
                ),
            ]
        else:
            events = [
                WorkerTaskUpdate(
                    target_user_ids=workers,
                    task=ref,
                    action=WorkerAction.TASK_COMPLETED,
                )
            ]
        await self._notify(actor.tenant_id, *events)
        return TransitionResult(task=task, assignment=assignment)

    async def reject(
        self, actor: ActorContext, task_id: str, comment: str | None
    ) -> TransitionResult:
        """Return the task to its workers with a mandatory comment."""
        text = _required_comment(comment)
        action = WorkflowAction.REJECT
        require_role(action, actor.role)
        task, project = await self._load(actor, task_id)
        require_transition(action, actor.role, task.status)
        latest = await self._latest(task)
        await self.access.require_approver(
            actor, task, latest.approval_level, action.value
        )

        assignment = await self._transition_assignment(
            latest, TaskStatus.RETURNED_FOR_REVISION, rejection_comment=text
        )
        task = await self._move_task(
            actor, task, TaskStatus.RETURNED_FOR_REVISION, action, comment=text
        )
        workers = await self.access.workers_for(task)
        await self._notify(
            actor.tenant_id,
            WorkerTaskUpdate(
                target_user_ids=tuple(workers),
                task=_ref(task, project),
                action=WorkerAction.COMPANY_REJECTED,
                comment=text,
            ),
        )
        return TransitionResult(task=task, assignment=assignment)

    async def client_reply(
        self,
        actor: ActorContext,
        task_id: str,
        comment: str | None,
        uploads: list[ClientUpload] | None = None,
    ) -> TransitionResult:
        """Client answers a task submitted to them (once per submission)."""
        action = WorkflowAction.CLIENT_REPLY
        require_role(action, actor.role)
        task, project = await self._load(actor, task_id)
        await self.access.require_client(actor, task)
        require_transition(action, actor.role, task.status)
        latest = await self._latest(task)

        assignment = await self.store.append_client_reply(
            task, latest, comment, list(uploads or [])
        )
        task = await self._move_task(actor, task, TaskStatus.CLIENT_REPLY, action)

        ref = _ref(task, project)
        workers = await self.access.workers_for(task)
        approvers = await self.access.approvers_for(task, latest.approval_level)
        await self._notify(
            actor.tenant_id,
            WorkerTaskUpdate(
                target_user_ids=tuple(workers),
                task=ref,
                action=WorkerAction.CLIENT_REPLIED,
            ),
            ActivityNotice(
                target_user_ids=tuple(approvers), task=ref, summary="Client replied"
            ),
        )
        return TransitionResult(task=task, assignment=assignment)

    async def accept_client_documents(
        self, actor: ActorContext, task_id: str
    ) -> TransitionResult:
        """Complete the task once every requested client document is uploaded."""
        action = WorkflowAction.ACCEPT_CLIENT_DOCUMENTS
        require_role(action, actor.role)
        task, project = await self._load(actor, task_id)
        require_transition(action, actor.role, task.status)
        latest = await self._latest(task)
        await self.access.require_approver(
            actor, task, latest.approval_level, action.value
        )
        if not await self.ledger.all_fulfilled(actor.tenant_id, latest.id):
            raise InvalidStateException(
                "Not all requested client documents have been uploaded",
                current_state=task.status.value,
                action=action.value,
            )

        assignment = await self._transition_assignment(latest, TaskStatus.COMPLETED)
        task = await self._move_task(actor, task, TaskStatus.COMPLETED, action)

        ref = _ref(task, project)
        workers = await self.access.workers_for(task)
        clients = await self.access.clients_for(task)
        await self._notify(
            actor.tenant_id,
            WorkerTaskUpdate(
                target_user_ids=tuple(workers),
                task=ref,
                action=WorkerAction.TASK_COMPLETED,
            ),
            ClientTaskUpdate(
                target_user_ids=tuple(clients), task=ref, status=TaskStatus.COMPLETED
            ),
        )
        return TransitionResult(task=task, assignment=assignment)

    async def request_reupload(
        self, actor: ActorContext, task_id: str, comment: str | None
    ) -> TransitionResult:
        """Send the task back to the client on a fresh assignment.

        The client's reply stays on the previous assignment; the new one
        copies worker documents and re-opens every client document request.
        """
        text = _required_comment(comment, max_length=REUPLOAD_COMMENT_MAX_LENGTH)
        action = WorkflowAction.REQUEST_REUPLOAD
        require_role(action, actor.role)
        task, project = await self._load(actor, task_id)
        require_transition(action, actor.role, task.status)
        latest = await self._latest(task)
        await self.access.require_approver(
            actor, task, latest.approval_level, action.value
        )

        assignment = await self.store.create_reupload(task, latest, text)
        task = await self._move_task(
            actor, task, TaskStatus.SUBMITTED_TO_CLIENT, action, comment=text
        )

        ref = _ref(task, project)
        clients = await self.access.clients_for(task)
        workers = await self.access.workers_for(task)
        await self._notify(
            actor.tenant_id,
            ClientTaskUpdate(
                target_user_ids=tuple(clients),
                task=ref,
                status=TaskStatus.SUBMITTED_TO_CLIENT,
                comment=text,
            ),
            WorkerTaskUpdate(
                target_user_ids=tuple(workers),
                task=ref,
                action=WorkerAction.REUPLOAD_REQUESTED,
                comment=text,
            ),
        )
        return TransitionResult(task=task, assignment=assignment)

    async def _load(
        self, actor: ActorContext, task_id: str
    ) -> tuple[TaskEntity, ProjectEntity]:
        """Lock the task row and check the project is visible and in progress."""
        task = await self.task_repo.get(actor.tenant_id, task_id, for_update=True)
        if task is None:
            raise ResourceNotFoundException("task", task_id)
        project = await self.access.get_visible_project(actor, task.project_id)
        if not project.is_active():
            raise ProjectNotActiveException(project.id, project.status.value)
        return task, project

    async def _latest(self, task: TaskEntity) -> AssignmentEntity:
        latest = await self.assignment_repo.get_latest(task.id)
        if latest is None or latest.status != task.status:
            raise InvalidStateException(
                "Task has no submission in its current status",
                current_state=task.status.value,
            )
        return latest

    async def _transition_assignment(
        self,
        assignment: AssignmentEntity,
        status: TaskStatus,
        *,
        approval_level: int | None = None,
        rejection_comment: str | None = None,
    ) -> AssignmentEntity:
        changed = await self.assignment_repo.transition(
            assignment.id,
            expected_status=assignment.status,
            expected_version=assignment.version,
            status=status,
            approval_level=approval_level,
            rejection_comment=rejection_comment,
        )
        if not changed:
            raise InvalidStateException(
                "Submission was changed by another request; reload and retry",
                current_state=assignment.status.value,
            )
        updated = await self.assignment_repo.get(assignment.tenant_id, assignment.id)
        if updated is None:
            raise ResourceNotFoundException("assignment", assignment.id)
        return updated

    async def _move_task(
        self,
        actor: ActorContext,
        task: TaskEntity,
        status: TaskStatus,
        action: WorkflowAction,
        *,
        comment: str | None = None,
    ) -> TaskEntity:
        """Conditionally write the new status, log activity, unlock the next step on completion."""
        completion = CompletionStatus.for_status(status)
        completed_at = utc_now() if completion == CompletionStatus.COMPLETED else None
        with tracer.start_as_current_span("task.transition") as span:
            span.set_attribute("task.id", task.id)
            span.set_attribute("task.action", action.value)
            changed = await self.task_repo.update_status(
                task.id,
                expected=task.status,
                status=status,
                completion_status=completion,
                completed_at=completed_at,
            )
            if not changed:
                raise InvalidStateException(
                    "Task was changed by another request; reload and retry",
                    current_state=task.status.value,
                    action=action.value,
                )
            meta = {
                "previous_status": task.status.value,
                "new_status": status.value,
                "role": actor.role.value,
            }
            if comment:
                meta["comment"] = comment
            await self.activity_repo.record(
                actor.tenant_id,
                project_id=task.project_id,
                task_id=task.id,
                user_id=actor.user_id,
                action=action.value,
                description=(
                    f"Task '{task.name}' moved from '{task.status.value}' to '{status.value}'"
                ),
                meta=meta,
            )
        logger.info(
            "Task %s moved %s -> %s by user %s (%s)",
            task.id,
            task.status.value,
            status.value,
            actor.user_id,
            action.value,
        )
        moved = dataclasses.replace(
            task, status=status, completion_status=completion, completed_at=completed_at
        )
        if completion == CompletionStatus.COMPLETED:
            await self._unlock_next_step(moved)
        return moved

    async def _unlock_next_step(self, task: TaskEntity) -> None:
        """Unlock the following working step once no required task is left open."""
        if await self.task_repo.count_incomplete_required(task.working_step_id):
            return
        step = await self.project_repo.get_step(task.working_step_id)
        if step is None:
            return
        unlocked = await self.project_repo.unlock_next_step(task.project_id, step.order)
        if unlocked is not None:
            logger.info(
                "Unlocked working step %s in project %s", unlocked.id, task.project_id
            )

    async def _notify(self, tenant_id: str, *events: NotificationEvent) -> None:
        if self.dispatcher is None:
            return
        await dispatch_best_effort(self.dispatcher, tenant_id, *events)
