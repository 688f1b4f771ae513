"""Tests for domain entities, enums, state types and the workflow transition table."""

from datetime import UTC, datetime

import pytest

from workpaper.domain.entities import (
    AssignmentEntity,
    ClientDocumentRequestEntity,
    Fulfilled,
    NoReply,
    NotificationEntity,
    ProjectEntity,
    Read,
    Replied,
    TaskEntity,
    Unfulfilled,
    Unread,
    fulfillment,
    read_state,
    reply_state,
)
from workpaper.domain.enums import (
    ActorRole,
    ClientInteract,
    CompletionStatus,
    NotificationType,
    ProjectStatus,
    TaskStatus,
    TeamRole,
    WorkflowAction,
)
from workpaper.domain.exceptions import AuthorizationException, InvalidStateException
from workpaper.domain.workflow import (
    TRANSITIONS,
    require_role,
    require_transition,
    resolve_approval,
    routes_to_client,
)

NOW = datetime(2025, 3, 1, 9, 30, tzinfo=UTC)


def _task(**kwargs) -> TaskEntity:
    defaults = {
        "id": "task-1",
        "tenant_id": "t1",
        "project_id": "p1",
        "working_step_id": "s1",
        "name": "Bank reconciliation",
        "order": 0,
        "is_required": True,
        "client_interact": ClientInteract.READ_ONLY,
        "multiple_files": False,
        "status": TaskStatus.SUBMITTED,
        "completion_status": CompletionStatus.IN_PROGRESS,
    }
    defaults.update(kwargs)
    return TaskEntity(**defaults)


def _assignment(level: int = 0, requests: int = 0) -> AssignmentEntity:
    return AssignmentEntity(
        id="asg-1",
        tenant_id="t1",
        task_id="task-1",
        sequence=1,
        worker_id="u-worker",
        notes="done",
        status=TaskStatus.SUBMITTED,
        approval_level=level,
        version=1,
        created_at=NOW,
        client_document_requests=[
            ClientDocumentRequestEntity(f"cdr-{i}", "asg-1", f"Doc {i}", None)
            for i in range(requests)
        ],
    )


def test_enum_values_are_the_stored_strings() -> None:
    assert TaskStatus.values() == [
        "Draft",
        "Submitted",
        "Under Review",
        "Approved",
        "Returned for Revision",
        "Submitted to Client",
        "Client Reply",
        "Completed",
    ]
    assert ProjectStatus.IN_PROGRESS.value == "In Progress"
    assert ClientInteract.values() == ["read_only", "comment", "upload"]
    assert "document_request" in NotificationType.values()
    assert TeamRole.CLIENT not in TeamRole.approving()
    assert TeamRole.WORKER not in TeamRole.approving()


@pytest.mark.parametrize(
    ("status", "expected"),
    [
        (TaskStatus.DRAFT, CompletionStatus.PENDING),
        (TaskStatus.SUBMITTED, CompletionStatus.IN_PROGRESS),
        (TaskStatus.RETURNED_FOR_REVISION, CompletionStatus.IN_PROGRESS),
        (TaskStatus.CLIENT_REPLY, CompletionStatus.IN_PROGRESS),
        (TaskStatus.APPROVED, CompletionStatus.COMPLETED),
        (TaskStatus.COMPLETED, CompletionStatus.COMPLETED),
    ],
)
def test_completion_status_follows_task_status(status, expected) -> None:
    assert CompletionStatus.for_status(status) == expected


def test_project_is_active_only_in_progress() -> None:
    project = ProjectEntity("p1", "t1", "Audit", None, ProjectStatus.IN_PROGRESS)
    assert project.is_active()
    for status in (ProjectStatus.COMPLETED, ProjectStatus.SUSPENDED, ProjectStatus.CANCELED):
        project.status = status
        assert not project.is_active()


def test_task_approval_levels() -> None:
    task = _task(approval_chain=[TeamRole.TEAM_LEADER, TeamRole.PARTNER])
    assert task.approval_levels == 2
    assert task.role_for_level(0) == TeamRole.TEAM_LEADER
    assert task.role_for_level(1) == TeamRole.PARTNER
    assert task.role_for_level(2) is None
    assert not task.is_final_level(0)
    assert task.is_final_level(1)

    single = _task(approval_chain=[])
    assert single.approval_levels == 1
    assert single.is_final_level(0)
    assert single.role_for_level(0) is None


def test_one_shot_state_types() -> None:
    assert reply_state(None, None) == NoReply()
    assert reply_state(None, NOW) == Replied(comment="", replied_at=NOW)
    assert fulfillment(None, None) == Unfulfilled()
    assert fulfillment("a.pdf", NOW) == Fulfilled(file_path="a.pdf", uploaded_at=NOW)
    with pytest.raises(ValueError):
        fulfillment("a.pdf", None)
    assert read_state(None) == Unread()
    assert read_state(NOW) == Read(read_at=NOW)


def test_entity_properties_expose_state() -> None:
    request = ClientDocumentRequestEntity("cdr-1", "asg-1", "Invoice", None)
    assert not request.is_fulfilled
    assert request.file_path is None
    request.state = Fulfilled("inv.pdf", NOW)
    assert request.file_path == "inv.pdf"
    assert request.uploaded_at == NOW

    assignment = _assignment(requests=1)
    assert not assignment.has_client_reply
    assert assignment.client_comment is None
    assert not assignment.all_requests_fulfilled()
    assignment.client_document_requests[0].state = Fulfilled("x.pdf", NOW)
    assignment.reply = Replied("Sent", NOW)
    assert assignment.all_requests_fulfilled()
    assert assignment.client_comment == "Sent"
    assert assignment.client_replied_at == NOW
    assert _assignment().all_requests_fulfilled()

    notification = NotificationEntity(
        "n1", "t1", "u1", NotificationType.APPROVAL, "t", "m", None, NOW
    )
    assert not notification.is_read
    assert notification.read_at is None
    notification.state = Read(NOW)
    assert notification.is_read


def test_transition_table_sources() -> None:
    assert TRANSITIONS[WorkflowAction.SUBMIT].sources == {
        TaskStatus.DRAFT,
        TaskStatus.RETURNED_FOR_REVISION,
    }
    assert TRANSITIONS[WorkflowAction.CLIENT_REPLY].roles == {ActorRole.CLIENT}
    assert TRANSITIONS[WorkflowAction.APPROVE].target is None


def test_require_transition_checks_role_then_state() -> None:
    with pytest.raises(AuthorizationException):
        require_role(WorkflowAction.APPROVE, ActorRole.WORKER)
    with pytest.raises(AuthorizationException):
        require_transition(WorkflowAction.SUBMIT, ActorRole.CLIENT, TaskStatus.COMPLETED)
    with pytest.raises(InvalidStateException) as exc_info:
        require_transition(WorkflowAction.SUBMIT, ActorRole.WORKER, TaskStatus.SUBMITTED)
    assert exc_info.value.details == {"current_state": "Submitted", "action": "submit"}
    assert (
        require_transition(WorkflowAction.REQUEST_REUPLOAD, ActorRole.ADMIN, TaskStatus.CLIENT_REPLY).target
        == TaskStatus.SUBMITTED_TO_CLIENT
    )


def test_resolve_approval() -> None:
    chain = [TeamRole.TEAM_LEADER, TeamRole.PARTNER]
    assert resolve_approval(_task(approval_chain=chain), _assignment(0)) == (
        TaskStatus.UNDER_REVIEW,
        1,
    )
    assert resolve_approval(_task(approval_chain=chain), _assignment(1)) == (
        TaskStatus.APPROVED,
        1,
    )
    upload = _task(client_interact=ClientInteract.UPLOAD)
    assert resolve_approval(upload, _assignment(0, requests=1)) == (
        TaskStatus.SUBMITTED_TO_CLIENT,
        0,
    )


def test_routes_to_client_by_interaction_mode() -> None:
    assert routes_to_client(_task(client_interact=ClientInteract.COMMENT), _assignment())
    assert routes_to_client(_task(client_interact=ClientInteract.UPLOAD), _assignment(requests=2))
    assert not routes_to_client(_task(client_interact=ClientInteract.UPLOAD), _assignment())
    assert not routes_to_client(
        _task(client_interact=ClientInteract.READ_ONLY), _assignment(requests=1)
    )
