"""Task workflow transition table.

Stages are a fixed enumeration. Each action lists the actor roles that may
perform it and the task statuses it may start from; require_transition
checks both and raises AuthorizationException or InvalidStateException.
"""

from dataclasses import dataclass

from workpaper.domain.entities.assignment import AssignmentEntity
from workpaper.domain.entities.task import TaskEntity
from workpaper.domain.enums import ActorRole, ClientInteract, TaskStatus, WorkflowAction
from workpaper.domain.exceptions import AuthorizationException, InvalidStateException

_COMPANY_APPROVERS = frozenset({ActorRole.APPROVER, ActorRole.ADMIN})


@dataclass(frozen=True)
class Transition:
    """Allowed roles and source states for one workflow action."""

    action: WorkflowAction
    roles: frozenset[ActorRole]
    sources: frozenset[TaskStatus]
    target: TaskStatus | None  # None: resolved by resolve_approval


TRANSITIONS: dict[WorkflowAction, Transition] = {
    WorkflowAction.SUBMIT: Transition(
        WorkflowAction.SUBMIT,
        frozenset({ActorRole.WORKER, ActorRole.ADMIN}),
        frozenset({TaskStatus.DRAFT, TaskStatus.RETURNED_FOR_REVISION}),
        TaskStatus.SUBMITTED,
    ),
    WorkflowAction.APPROVE: Transition(
        WorkflowAction.APPROVE,
        _COMPANY_APPROVERS,
        frozenset({TaskStatus.SUBMITTED, TaskStatus.UNDER_REVIEW}),
        None,
    ),
    WorkflowAction.REJECT: Transition(
        WorkflowAction.REJECT,
        _COMPANY_APPROVERS,
        frozenset({TaskStatus.SUBMITTED, TaskStatus.UNDER_REVIEW}),
        TaskStatus.RETURNED_FOR_REVISION,
    ),
    WorkflowAction.CLIENT_REPLY: Transition(
        WorkflowAction.CLIENT_REPLY,
        frozenset({ActorRole.CLIENT}),
        frozenset({TaskStatus.SUBMITTED_TO_CLIENT}),
        TaskStatus.CLIENT_REPLY,
    ),
    WorkflowAction.ACCEPT_CLIENT_DOCUMENTS: Transition(
        WorkflowAction.ACCEPT_CLIENT_DOCUMENTS,
        _COMPANY_APPROVERS,
        frozenset({TaskStatus.CLIENT_REPLY}),
        TaskStatus.COMPLETED,
    ),
    WorkflowAction.REQUEST_REUPLOAD: Transition(
        WorkflowAction.REQUEST_REUPLOAD,
        _COMPANY_APPROVERS,
        frozenset({TaskStatus.CLIENT_REPLY}),
        TaskStatus.SUBMITTED_TO_CLIENT,
    ),
}


def require_role(action: WorkflowAction, role: ActorRole) -> Transition:
    """Return the transition for action; raise if role may never perform it."""
    transition = TRANSITIONS[action]
    if role not in transition.roles:
        raise AuthorizationException("task", action.value)
    return transition


def require_transition(
    action: WorkflowAction, role: ActorRole, current: TaskStatus
) -> Transition:
    """Check role and source state for action.

    Raises:
        AuthorizationException: role may not perform action.
        InvalidStateException: action is not legal from current.
    """
    transition = require_role(action, role)
    if current not in transition.sources:
        raise InvalidStateException(
            f"Cannot {action.value.replace('_', ' ')} a task in status '{current.value}'",
            current_state=current.value,
            action=action.value,
        )
    return transition


def routes_to_client(task: TaskEntity, assignment: AssignmentEntity) -> bool:
    """Final approval goes to the client for comment tasks, and for upload
    tasks whose assignment carries at least one client document request."""
    if task.client_interact == ClientInteract.COMMENT:
        return True
    return task.accepts_client_input() and bool(assignment.client_document_requests)


def resolve_approval(
    task: TaskEntity, assignment: AssignmentEntity
) -> tuple[TaskStatus, int]:
    """Return (next status, next approval level) for an approve on assignment."""
    level = assignment.approval_level
    if not task.is_final_level(level):
        return TaskStatus.UNDER_REVIEW, level + 1
    if routes_to_client(task, assignment):
        return TaskStatus.SUBMITTED_TO_CLIENT, level
    return TaskStatus.APPROVED, level
