"""TaskStateMachine tests on in-memory repositories (no Postgres)."""

from unittest.mock import AsyncMock

import pytest
from fakes import (
    ADMIN,
    CLIENT,
    LEAD,
    OTHER_WORKER,
    PARTNER,
    TENANT,
    TWO_LEVEL_CHAIN,
    WORKER,
    first_step,
)

from workpaper.application.dtos import (
    ActorContext,
    ClientUpload,
    DocumentRequestInput,
    SubmitCommand,
    UploadedFile,
)
from workpaper.domain.enums import (
    ActorRole,
    ClientInteract,
    CompletionStatus,
    NotificationType,
    ProjectStatus,
    TaskStatus,
    TeamRole,
)
from workpaper.domain.exceptions import (
    AuthorizationException,
    InvalidStateException,
    ProjectNotActiveException,
    ResourceNotFoundException,
    ValidationException,
)

DOCS = [DocumentRequestInput("Bank statement"), DocumentRequestInput("Trial balance")]


def _task(world, **kwargs):
    return world.db.add_task(first_step(world.db), **kwargs)


def _locked_step(world):
    return next(s for s in world.db.steps.values() if s.order == 2)


async def _submit(world, task, actor=WORKER, **kwargs):
    kwargs.setdefault("notes", "Reconciled to bank")
    return await world.machine.submit(actor, task.id, SubmitCommand(**kwargs))


async def _with_client(world):
    """Upload task submitted, approved by the lead and waiting on the client."""
    task = _task(
        world,
        client_interact=ClientInteract.UPLOAD,
        approval_chain=[TeamRole.TEAM_LEADER],
    )
    await _submit(world, task, client_document_requests=DOCS)
    result = await world.machine.approve(LEAD, task.id)
    assert result.task.status == TaskStatus.SUBMITTED_TO_CLIENT
    return task, result.assignment


async def _client_replied(world):
    task, assignment = await _with_client(world)
    uploads = [
        ClientUpload(r.id, f"uploads/{r.name}.pdf")
        for r in assignment.client_document_requests
    ]
    result = await world.machine.client_reply(CLIENT, task.id, "Attached", uploads)
    return task, result.assignment


# ---- submit ----


async def test_submit_creates_first_assignment_and_notifies_level_zero(world, publisher) -> None:
    """Assigned worker submits: task Submitted, assignment sequence 1 at level 0."""
    task = _task(world, approval_chain=TWO_LEVEL_CHAIN)

    result = await _submit(
        world, task, files=[UploadedFile("Working paper", "wp/recon.xlsx")]
    )

    assert result.task.status == TaskStatus.SUBMITTED
    assert result.task.completion_status == CompletionStatus.IN_PROGRESS
    assert result.assignment.sequence == 1
    assert result.assignment.approval_level == 0
    assert result.assignment.status == TaskStatus.SUBMITTED
    assert [d.file_path for d in result.assignment.documents] == ["wp/recon.xlsx"]
    assert world.db.tasks[task.id].status == TaskStatus.SUBMITTED

    lead_rows = world.db.notifications_for(LEAD.user_id, NotificationType.APPROVAL)
    assert len(lead_rows) == 1
    assert lead_rows[0].data["approval_level"] == 0
    assert lead_rows[0].data["approval_role"] == "team_leader"
    assert world.db.notifications_for(PARTNER.user_id) == []
    assert [(u, e) for u, e, _ in publisher.published] == [
        (LEAD.user_id, "NewApprovalNotification")
    ]


async def test_submit_by_unassigned_worker_is_denied(world) -> None:
    task = _task(world)
    with pytest.raises(AuthorizationException):
        await _submit(world, task, actor=OTHER_WORKER)
    assert world.db.tasks[task.id].status == TaskStatus.DRAFT


async def test_submit_by_approver_role_is_denied(world) -> None:
    task = _task(world)
    with pytest.raises(AuthorizationException):
        await _submit(world, task, actor=LEAD)


async def test_submit_in_locked_step_rejected_for_worker_allowed_for_admin(world) -> None:
    task = world.db.add_task(_locked_step(world))

    with pytest.raises(InvalidStateException) as exc_info:
        await _submit(world, task)
    assert "locked" in exc_info.value.message

    result = await _submit(world, task, actor=ADMIN)
    assert result.task.status == TaskStatus.SUBMITTED
    assert result.assignment.worker_id == ADMIN.user_id


async def test_empty_submission_is_rejected(world) -> None:
    task = _task(world)
    with pytest.raises(ValidationException):
        await world.machine.submit(WORKER, task.id, SubmitCommand(notes="   "))


async def test_upload_task_requires_client_document_requests(world) -> None:
    task = _task(world, client_interact=ClientInteract.UPLOAD)
    with pytest.raises(ValidationException) as exc_info:
        await _submit(world, task)
    assert exc_info.value.details["field"] == "client_document_requests"
    assert world.db.tasks[task.id].status == TaskStatus.DRAFT
    assert world.db.assignments == {}


async def test_single_file_task_rejects_several_files(world) -> None:
    task = _task(world, multiple_files=False)
    files = [UploadedFile("a", "a.pdf"), UploadedFile("b", "b.pdf")]
    with pytest.raises(ValidationException):
        await _submit(world, task, files=files)


async def test_submit_on_inactive_project_is_rejected(world) -> None:
    task = _task(world)
    world.db.projects[task.project_id].status = ProjectStatus.COMPLETED
    with pytest.raises(ProjectNotActiveException) as exc_info:
        await _submit(world, task)
    assert exc_info.value.error_code == "PROJECT_NOT_ACTIVE"
    assert world.db.tasks[task.id].status == TaskStatus.DRAFT
    assert world.db.assignments == {}
    assert world.db.notifications == []


async def test_unknown_task_and_other_tenant_are_not_found(world) -> None:
    task = _task(world)
    with pytest.raises(ResourceNotFoundException):
        await world.machine.submit(WORKER, "task-missing", SubmitCommand(notes="x"))
    outsider = ActorContext(WORKER.user_id, "t2", ActorRole.WORKER)
    with pytest.raises(ResourceNotFoundException):
        await world.machine.submit(outsider, task.id, SubmitCommand(notes="x"))


async def test_non_member_sees_not_found(world) -> None:
    task = _task(world)
    stranger = ActorContext("u-stranger", TENANT, ActorRole.WORKER)
    world.db.task_workers[task.id].append(stranger.user_id)
    with pytest.raises(ResourceNotFoundException):
        await _submit(world, task, actor=stranger)


# ---- approve / reject ----


async def test_two_level_chain_walks_levels_then_completes(world) -> None:
    task = _task(world, approval_chain=TWO_LEVEL_CHAIN)
    await _submit(world, task)

    first = await world.machine.approve(LEAD, task.id)
    assert first.task.status == TaskStatus.UNDER_REVIEW
    assert first.assignment.approval_level == 1
    partner_rows = world.db.notifications_for(PARTNER.user_id, NotificationType.APPROVAL)
    assert len(partner_rows) == 1
    worker_rows = world.db.notifications_for(WORKER.user_id, NotificationType.ASSIGNMENT)
    assert worker_rows[-1].data["action_type"] == "company_approved"

    with pytest.raises(AuthorizationException):
        await world.machine.approve(LEAD, task.id)

    final = await world.machine.approve(PARTNER, task.id)
    assert final.task.status == TaskStatus.APPROVED
    assert final.task.completion_status == CompletionStatus.COMPLETED
    assert final.task.completed_at is not None
    assert world.db.tasks[task.id].completion_status == CompletionStatus.COMPLETED
    worker_rows = world.db.notifications_for(WORKER.user_id, NotificationType.ASSIGNMENT)
    assert worker_rows[-1].data["action_type"] == "task_completed"


async def test_wrong_team_role_cannot_approve_level(world) -> None:
    task = _task(world, approval_chain=TWO_LEVEL_CHAIN)
    await _submit(world, task)
    with pytest.raises(AuthorizationException):
        await world.machine.approve(PARTNER, task.id)


async def test_empty_chain_is_single_level_for_any_approving_role(world) -> None:
    task = _task(world, approval_chain=[])
    await _submit(world, task)

    approvers = {n.user_id for n in world.db.notifications if n.type == NotificationType.APPROVAL}
    assert approvers == {LEAD.user_id, PARTNER.user_id}

    result = await world.machine.approve(PARTNER, task.id)
    assert result.task.status == TaskStatus.APPROVED


async def test_admin_approves_at_any_level(world) -> None:
    task = _task(world, approval_chain=TWO_LEVEL_CHAIN)
    await _submit(world, task)
    await world.machine.approve(ADMIN, task.id)
    result = await world.machine.approve(ADMIN, task.id)
    assert result.task.status == TaskStatus.APPROVED


async def test_approve_draft_task_is_invalid_state(world) -> None:
    task = _task(world)
    with pytest.raises(InvalidStateException) as exc_info:
        await world.machine.approve(LEAD, task.id)
    assert exc_info.value.details["current_state"] == "Draft"


async def test_worker_cannot_approve(world) -> None:
    task = _task(world)
    await _submit(world, task)
    with pytest.raises(AuthorizationException):
        await world.machine.approve(WORKER, task.id)


async def test_final_approval_with_requests_goes_to_client(world) -> None:
    task, assignment = await _with_client(world)

    assert world.db.tasks[task.id].completion_status == CompletionStatus.IN_PROGRESS
    assert len(assignment.client_document_requests) == 2
    client_rows = world.db.notifications_for(CLIENT.user_id, NotificationType.CLIENT_TASK)
    assert len(client_rows) == 1
    assert client_rows[0].url == f"/client/tasks/{task.id}"


async def test_read_only_task_completes_on_final_approval(world) -> None:
    task = _task(
        world, client_interact=ClientInteract.READ_ONLY, approval_chain=[TeamRole.TEAM_LEADER]
    )
    await _submit(world, task)
    result = await world.machine.approve(LEAD, task.id)
    assert result.task.status == TaskStatus.APPROVED
    assert world.db.notifications_for(CLIENT.user_id) == []

    with pytest.raises(InvalidStateException):
        await world.machine.client_reply(CLIENT, task.id, "Looks fine")
    assert world.db.tasks[task.id].status == TaskStatus.APPROVED


async def test_comment_task_goes_to_client_and_takes_comment_reply(world) -> None:
    task = _task(
        world, client_interact=ClientInteract.COMMENT, approval_chain=[TeamRole.TEAM_LEADER]
    )
    await _submit(world, task, notes="ready")

    approved = await world.machine.approve(LEAD, task.id)
    assert approved.task.status == TaskStatus.SUBMITTED_TO_CLIENT
    assert approved.task.completion_status == CompletionStatus.IN_PROGRESS
    assert world.db.notifications_for(CLIENT.user_id, NotificationType.CLIENT_TASK)

    with pytest.raises(ValidationException):
        await world.machine.client_reply(
            CLIENT, task.id, "With a file", [ClientUpload("cdr-x", "x.pdf")]
        )

    replied = await world.machine.client_reply(CLIENT, task.id, "Looks fine")
    assert replied.task.status == TaskStatus.CLIENT_REPLY
    assert replied.assignment.client_comment == "Looks fine"

    accepted = await world.machine.accept_client_documents(LEAD, task.id)
    assert accepted.task.status == TaskStatus.COMPLETED


async def test_reject_requires_comment(world) -> None:
    task = _task(world)
    await _submit(world, task)
    sent = len(world.db.notifications)
    with pytest.raises(ValidationException):
        await world.machine.reject(LEAD, task.id, "  ")
    assert world.db.tasks[task.id].status == TaskStatus.SUBMITTED
    assert len(world.db.notifications) == sent
    assert world.db.notifications_for(WORKER.user_id) == []
    assert [a.status for a in world.db.assignments.values()] == [TaskStatus.SUBMITTED]


async def test_reject_returns_task_and_resubmit_appends_assignment(world) -> None:
    task = _task(world, approval_chain=TWO_LEVEL_CHAIN)
    await _submit(world, task)
    await world.machine.approve(LEAD, task.id)

    rejected = await world.machine.reject(PARTNER, task.id, "Missing bank letter")
    assert rejected.task.status == TaskStatus.RETURNED_FOR_REVISION
    assert rejected.assignment.rejection_comment == "Missing bank letter"
    message = world.db.notifications_for(WORKER.user_id)[-1].message
    assert message.endswith("Reason: Missing bank letter")

    again = await _submit(world, task, notes="Added bank letter")
    assert again.assignment.sequence == 2
    assert again.assignment.approval_level == 0
    history = await world.store.get_history(WORKER, task.id)
    assert [a.sequence for a in history] == [2, 1]
    assert history[1].status == TaskStatus.RETURNED_FOR_REVISION


# ---- client reply / accept / re-upload ----


async def test_client_reply_fulfills_requests_and_notifies(world) -> None:
    task, assignment = await _client_replied(world)

    assert world.db.tasks[task.id].status == TaskStatus.CLIENT_REPLY
    assert assignment.client_comment == "Attached"
    assert assignment.client_replied_at is not None
    assert assignment.all_requests_fulfilled()
    worker_rows = world.db.notifications_for(WORKER.user_id, NotificationType.ASSIGNMENT)
    assert worker_rows[-1].data["action_type"] == "client_replied"
    assert world.db.notifications_for(LEAD.user_id, NotificationType.ACTIVITY)


async def test_client_reply_is_one_shot(world) -> None:
    task, _ = await _client_replied(world)
    with pytest.raises(InvalidStateException):
        await world.machine.client_reply(CLIENT, task.id, "Again")


async def test_only_clients_reply(world) -> None:
    task, _ = await _with_client(world)
    with pytest.raises(AuthorizationException):
        await world.machine.client_reply(LEAD, task.id, "Not me")
    with pytest.raises(AuthorizationException):
        await world.machine.client_reply(ADMIN, task.id, "Not me either")


async def test_client_reply_needs_comment_or_uploads(world) -> None:
    task, _ = await _with_client(world)
    with pytest.raises(ValidationException):
        await world.machine.client_reply(CLIENT, task.id, "", [])


async def test_client_reply_upload_for_unknown_request_is_not_found(world) -> None:
    task, _ = await _with_client(world)
    with pytest.raises(ResourceNotFoundException):
        await world.machine.client_reply(
            CLIENT, task.id, None, [ClientUpload("cdr-unknown", "x.pdf")]
        )
    assert world.db.tasks[task.id].status == TaskStatus.SUBMITTED_TO_CLIENT


async def test_accept_requires_every_request_fulfilled(world) -> None:
    task, assignment = await _with_client(world)
    first = assignment.client_document_requests[0]
    await world.machine.client_reply(
        CLIENT, task.id, "One of two", [ClientUpload(first.id, "statement.pdf")]
    )
    with pytest.raises(InvalidStateException):
        await world.machine.accept_client_documents(LEAD, task.id)
    assert world.db.tasks[task.id].status == TaskStatus.CLIENT_REPLY
    assert world.db.tasks[task.id].completion_status == CompletionStatus.IN_PROGRESS

    second = assignment.client_document_requests[1]
    await world.ledger.fulfill(CLIENT, second.id, "tb.xlsx")
    result = await world.machine.accept_client_documents(LEAD, task.id)
    assert result.task.status == TaskStatus.COMPLETED
    assert result.task.completion_status == CompletionStatus.COMPLETED


async def test_completing_last_required_task_unlocks_next_step(world) -> None:
    task, _ = await _client_replied(world)
    assert _locked_step(world).is_locked

    await world.machine.accept_client_documents(LEAD, task.id)

    assert not _locked_step(world).is_locked
    client_rows = world.db.notifications_for(CLIENT.user_id, NotificationType.CLIENT_TASK)
    assert client_rows[-1].title == "Task Completed"


async def test_open_required_task_keeps_next_step_locked(world) -> None:
    _task(world, name="Still open")
    task = _task(world, approval_chain=[TeamRole.TEAM_LEADER])
    await _submit(world, task)
    await world.machine.approve(LEAD, task.id)
    assert _locked_step(world).is_locked


async def test_request_reupload_appends_fresh_assignment(world) -> None:
    task, replied = await _client_replied(world)

    result = await world.machine.request_reupload(LEAD, task.id, "Statement is cut off")

    assert result.task.status == TaskStatus.SUBMITTED_TO_CLIENT
    assert result.assignment.sequence == replied.sequence + 1
    assert result.assignment.notes.endswith("Statement is cut off")
    assert not result.assignment.has_client_reply
    assert [r.name for r in result.assignment.client_document_requests] == [
        "Bank statement",
        "Trial balance",
    ]
    assert not any(r.is_fulfilled for r in result.assignment.client_document_requests)

    history = await world.store.get_history(LEAD, task.id)
    assert history[1].id == replied.id
    assert history[1].client_comment == "Attached"
    assert history[1].all_requests_fulfilled()

    client_message = world.db.notifications_for(CLIENT.user_id)[-1].message
    assert "Comment: Statement is cut off" in client_message

    again = await world.machine.client_reply(CLIENT, task.id, "Full copy attached")
    assert again.assignment.id == result.assignment.id


async def test_request_reupload_comment_is_bounded(world) -> None:
    task, _ = await _client_replied(world)
    with pytest.raises(ValidationException):
        await world.machine.request_reupload(LEAD, task.id, "x" * 1001)
    with pytest.raises(ValidationException):
        await world.machine.request_reupload(LEAD, task.id, None)


# ---- concurrency, activity log, notification failures ----


async def test_lost_assignment_race_raises_invalid_state(world) -> None:
    task = _task(world, approval_chain=TWO_LEVEL_CHAIN)
    await _submit(world, task)
    world.assignment_repo.transition = AsyncMock(return_value=False)

    with pytest.raises(InvalidStateException):
        await world.machine.approve(LEAD, task.id)
    assert world.db.tasks[task.id].status == TaskStatus.SUBMITTED


async def test_lost_task_race_raises_invalid_state(world) -> None:
    task = _task(world)
    world.task_repo.update_status = AsyncMock(return_value=False)
    with pytest.raises(InvalidStateException):
        await _submit(world, task)


async def test_transitions_are_recorded_in_activity_log(world) -> None:
    task = _task(world)
    await _submit(world, task)
    await world.machine.reject(LEAD, task.id, "Redo")

    submit_entry, reject_entry = world.db.activities
    assert submit_entry.action == "submit"
    assert submit_entry.user_id == WORKER.user_id
    assert submit_entry.meta["previous_status"] == "Draft"
    assert submit_entry.meta["new_status"] == "Submitted"
    assert reject_entry.meta["comment"] == "Redo"
    assert reject_entry.meta["role"] == "approver"


async def test_notification_storage_failure_does_not_fail_transition(world) -> None:
    task = _task(world)
    world.notification_repo.add_for_users = AsyncMock(side_effect=RuntimeError("db down"))

    result = await _submit(world, task)

    assert result.task.status == TaskStatus.SUBMITTED
    assert world.db.notifications == []


async def test_programming_error_in_dispatch_is_not_swallowed(world) -> None:
    task = _task(world)
    world.notification_repo.add_for_users = AsyncMock(side_effect=TypeError("bad call"))
    with pytest.raises(TypeError):
        await _submit(world, task)


async def test_publish_failure_keeps_persisted_notification(world, publisher) -> None:
    publisher.fail = True
    task = _task(world)

    await _submit(world, task)

    assert len(world.db.notifications_for(LEAD.user_id)) == 1
    assert publisher.published == []
