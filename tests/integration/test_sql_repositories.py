"""SQL repository integration tests. Require Postgres; session is rolled back after each test."""

from datetime import timedelta

import pytest

from workpaper.application.dtos.workflow import DocumentRequestInput, UploadedFile
from workpaper.domain.entities import Fulfilled, Replied, Unfulfilled
from workpaper.domain.enums import (
    ActorRole,
    ClientInteract,
    CompletionStatus,
    NotificationType,
    TaskStatus,
    TeamRole,
)
from workpaper.domain.exceptions import InvalidStateException
from workpaper.infrastructure.persistence.models import (
    Project,
    ProjectMember,
    Task,
    TaskWorker,
    Tenant,
    User,
    WorkingStep,
)
from workpaper.infrastructure.persistence.repositories import (
    ActivityLogRepository,
    AssignmentRepository,
    DocumentRequestRepository,
    NotificationRepository,
    ProjectRepository,
    TaskRepository,
)
from workpaper.shared.utils.datetime import utc_now


async def _seed(session, code: str) -> dict[str, str]:
    tenant = Tenant(code=code, name=f"Firm {code}")
    session.add(tenant)
    await session.flush()

    worker = User(tenant_id=tenant.id, username="w", email=f"w@{code}.test", role=ActorRole.WORKER.value)
    lead = User(tenant_id=tenant.id, username="l", email=f"l@{code}.test", role=ActorRole.APPROVER.value)
    session.add_all([worker, lead])
    project = Project(tenant_id=tenant.id, name="Audit", client_name="Acme")
    session.add(project)
    await session.flush()

    session.add_all(
        [
            ProjectMember(project_id=project.id, user_id=worker.id, team_role=TeamRole.WORKER.value),
            ProjectMember(
                project_id=project.id, user_id=lead.id, team_role=TeamRole.TEAM_LEADER.value
            ),
        ]
    )
    first = WorkingStep(project_id=project.id, name="Fieldwork", order=1, is_locked=False)
    second = WorkingStep(project_id=project.id, name="Reporting", order=2, is_locked=True)
    session.add_all([first, second])
    await session.flush()

    task = Task(
        tenant_id=tenant.id,
        project_id=project.id,
        working_step_id=first.id,
        name="Bank confirmations",
        client_interact=ClientInteract.UPLOAD.value,
        multiple_files=True,
        approval_chain=[TeamRole.TEAM_LEADER.value],
    )
    session.add(task)
    await session.flush()
    session.add(TaskWorker(task_id=task.id, user_id=worker.id))
    await session.flush()
    return {
        "tenant": tenant.id,
        "worker": worker.id,
        "lead": lead.id,
        "project": project.id,
        "step": first.id,
        "next_step": second.id,
        "task": task.id,
    }


async def _append(repo: AssignmentRepository, ids: dict[str, str], sequence: int = 1):
    return await repo.append(
        ids["tenant"],
        ids["task"],
        sequence=sequence,
        worker_id=ids["worker"],
        notes="Ready",
        status=TaskStatus.SUBMITTED,
        approval_level=0,
        documents=[UploadedFile(label="Recon", file_path="wp/recon.xlsx")],
        requests=[DocumentRequestInput(name="Bank statement")],
    )


@pytest.mark.requires_db
async def test_task_and_project_lookups(db_session) -> None:
    ids = await _seed(db_session, "sql-lookups")
    tasks = TaskRepository(db_session)
    projects = ProjectRepository(db_session)

    task = await tasks.get(ids["tenant"], ids["task"], for_update=True)
    assert task is not None
    assert task.status == TaskStatus.DRAFT
    assert task.approval_chain == [TeamRole.TEAM_LEADER]
    assert await tasks.get("other-tenant", ids["task"]) is None
    assert await tasks.list_worker_ids(ids["task"]) == [ids["worker"]]

    assert await projects.get_member_role(ids["project"], ids["lead"]) == TeamRole.TEAM_LEADER
    assert await projects.list_member_ids(ids["project"], [TeamRole.TEAM_LEADER]) == [ids["lead"]]
    assert await projects.get_memberships(ids["tenant"], ids["worker"]) == {
        ids["project"]: TeamRole.WORKER
    }


@pytest.mark.requires_db
async def test_assignment_append_and_duplicate_sequence(db_session) -> None:
    ids = await _seed(db_session, "sql-append")
    repo = AssignmentRepository(db_session)

    created = await _append(repo, ids)
    assert created.sequence == 1
    assert created.documents[0].file_path == "wp/recon.xlsx"
    assert isinstance(created.client_document_requests[0].state, Unfulfilled)

    with pytest.raises(InvalidStateException):
        await _append(repo, ids, sequence=1)

    await _append(repo, ids, sequence=2)
    history = await repo.list_for_task(ids["task"])
    assert [a.sequence for a in history] == [2, 1]
    latest = await repo.get_latest(ids["task"])
    assert latest is not None and latest.sequence == 2


@pytest.mark.requires_db
async def test_transition_and_client_reply_are_conditional(db_session) -> None:
    ids = await _seed(db_session, "sql-cas")
    repo = AssignmentRepository(db_session)
    created = await _append(repo, ids)

    assert await repo.transition(
        created.id,
        expected_status=TaskStatus.SUBMITTED,
        expected_version=created.version,
        status=TaskStatus.SUBMITTED_TO_CLIENT,
        approval_level=1,
    )
    stale = await repo.transition(
        created.id,
        expected_status=TaskStatus.SUBMITTED,
        expected_version=created.version,
        status=TaskStatus.REJECTED,
        rejection_comment="late",
    )
    assert stale is False

    now = utc_now()
    assert await repo.record_client_reply(created.id, comment="Attached", replied_at=now)
    assert not await repo.record_client_reply(created.id, comment="Again", replied_at=now)

    reloaded = await repo.get(ids["tenant"], created.id)
    assert reloaded is not None
    assert reloaded.status == TaskStatus.CLIENT_REPLY
    assert reloaded.approval_level == 1
    assert reloaded.version == created.version + 2
    assert isinstance(reloaded.reply, Replied)
    assert reloaded.reply.comment == "Attached"


@pytest.mark.requires_db
async def test_document_request_fulfilled_once(db_session) -> None:
    ids = await _seed(db_session, "sql-ledger")
    assignment = await _append(AssignmentRepository(db_session), ids)
    repo = DocumentRequestRepository(db_session)

    added = await repo.add(
        ids["tenant"], assignment.id, [DocumentRequestInput(name="Loan", description="Signed")]
    )
    assert len(await repo.list_for_assignment(assignment.id)) == 2

    now = utc_now()
    assert await repo.fulfill(added[0].id, file_path="c/loan.pdf", uploaded_at=now)
    assert not await repo.fulfill(added[0].id, file_path="c/other.pdf", uploaded_at=now)

    stored = await repo.get(ids["tenant"], added[0].id)
    assert stored is not None
    assert isinstance(stored.state, Fulfilled)
    assert stored.state.file_path == "c/loan.pdf"
    assert await repo.get("other-tenant", added[0].id) is None


@pytest.mark.requires_db
async def test_notifications_read_state(db_session) -> None:
    ids = await _seed(db_session, "sql-notify")
    repo = NotificationRepository(db_session)

    async def add(type: NotificationType, task_id: str | None):
        return await repo.add_for_users(
            ids["tenant"],
            [ids["lead"]],
            type=type,
            title="t",
            message="m",
            url=None,
            task_id=task_id,
            project_id=ids["project"],
            data={"task_id": task_id},
        )

    first = (await add(NotificationType.APPROVAL, ids["task"]))[0]
    await add(NotificationType.ASSIGNMENT, ids["task"])
    await add(NotificationType.APPROVAL, None)
    assert await repo.count_unread(ids["tenant"], ids["lead"]) == 3
    assert await repo.count_unread(ids["tenant"], ids["worker"]) == 0
    assert len(await repo.list_for_user(ids["tenant"], ids["lead"], limit=2)) == 2

    now = utc_now()
    assert await repo.mark_read(ids["tenant"], ids["lead"], first.id, now)
    assert not await repo.mark_read(ids["tenant"], ids["lead"], first.id, now)
    assert not await repo.mark_read(ids["tenant"], ids["worker"], first.id, now)
    marked = await repo.get_for_user(ids["tenant"], ids["lead"], first.id)
    assert marked is not None and marked.read_at is not None

    by_context = await repo.mark_read_by_context(
        ids["tenant"], ids["lead"], now, type=NotificationType.ASSIGNMENT, task_id=ids["task"]
    )
    assert by_context == 1
    assert await repo.mark_all_read(ids["tenant"], ids["lead"], now) == 1
    assert await repo.count_unread(ids["tenant"], ids["lead"]) == 0


@pytest.mark.requires_db
async def test_step_unlock_and_task_counts(db_session) -> None:
    ids = await _seed(db_session, "sql-steps")
    tasks = TaskRepository(db_session)
    projects = ProjectRepository(db_session)

    assert await tasks.count_incomplete_required(ids["step"]) == 1
    assert await tasks.count_tasks(ids["tenant"], [ids["project"]], worker_id=ids["worker"]) == 1
    assert await tasks.count_tasks(ids["tenant"], [], worker_id=ids["worker"]) == 0

    now = utc_now()
    assert await tasks.update_status(
        ids["task"],
        expected=TaskStatus.DRAFT,
        status=TaskStatus.COMPLETED,
        completion_status=CompletionStatus.COMPLETED,
        completed_at=now,
    )
    assert not await tasks.update_status(
        ids["task"],
        expected=TaskStatus.DRAFT,
        status=TaskStatus.SUBMITTED,
        completion_status=CompletionStatus.IN_PROGRESS,
        completed_at=None,
    )
    assert await tasks.count_incomplete_required(ids["step"]) == 0
    assert (
        await tasks.count_tasks(
            ids["tenant"],
            [ids["project"]],
            completion=[CompletionStatus.COMPLETED],
            completed_since=now - timedelta(days=7),
        )
        == 1
    )

    unlocked = await projects.unlock_next_step(ids["project"], after_order=1)
    assert unlocked is not None and unlocked.id == ids["next_step"]
    assert await projects.unlock_next_step(ids["project"], after_order=1) is None
    step = await projects.get_step(ids["next_step"])
    assert step is not None and step.is_locked is False


@pytest.mark.requires_db
async def test_activity_log_recent_first(db_session) -> None:
    ids = await _seed(db_session, "sql-activity")
    repo = ActivityLogRepository(db_session)
    for action in ("submit", "approve"):
        await repo.record(
            ids["tenant"],
            project_id=ids["project"],
            task_id=ids["task"],
            user_id=ids["worker"],
            action=action,
            description=action,
            meta={"sequence": 1},
        )
    recent = await repo.list_recent(ids["tenant"], [ids["project"]], limit=10)
    assert [a.action for a in recent] == ["approve", "submit"]
    assert recent[0].meta == {"sequence": 1}
