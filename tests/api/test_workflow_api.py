"""Task workflow and document request endpoints over in-memory repositories."""

import pytest
from fakes import ADMIN, CLIENT, LEAD, WORKER, bearer, first_step
from httpx import AsyncClient

from workpaper.api.v1.dependencies import (
    get_assignment_store,
    get_document_request_ledger,
    get_task_state_machine,
)
from workpaper.domain.enums import ClientInteract, ProjectStatus, TeamRole
from workpaper.main import app


@pytest.fixture
def api(world):
    """Route the workflow dependencies to the in-memory world."""
    app.dependency_overrides[get_task_state_machine] = lambda: world.machine
    app.dependency_overrides[get_document_request_ledger] = lambda: world.ledger
    app.dependency_overrides[get_assignment_store] = lambda: world.store
    return world


def _task(world, **kwargs):
    return world.db.add_task(first_step(world.db), **kwargs)


async def test_missing_token_is_401_with_bearer_challenge(client: AsyncClient, api) -> None:
    task = _task(api)
    response = await client.post(f"/api/v1/tasks/{task.id}/approve")
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"
    assert response.json()["error"] == "AUTHENTICATION_ERROR"


async def test_invalid_token_is_401(client: AsyncClient, api) -> None:
    task = _task(api)
    response = await client.post(
        f"/api/v1/tasks/{task.id}/approve",
        headers={"Authorization": "Bearer nope"},
    )
    assert response.status_code == 401


async def test_submit_returns_task_and_assignment(client: AsyncClient, api) -> None:
    task = _task(api, approval_chain=[TeamRole.TEAM_LEADER])
    response = await client.post(
        f"/api/v1/tasks/{task.id}/submit",
        json={
            "notes": "Reconciled",
            "files": [{"label": "Recon", "file_path": "wp/recon.xlsx"}],
        },
        headers=bearer(WORKER),
    )
    assert response.status_code == 200
    body = response.json()
    assert body["task"]["status"] == "Submitted"
    assert body["task"]["completion_status"] == "in_progress"
    assert body["assignment"]["sequence"] == 1
    assert body["assignment"]["documents"][0]["file_path"] == "wp/recon.xlsx"
    assert response.headers["X-Request-ID"]
    assert response.headers["X-Content-Type-Options"] == "nosniff"


async def test_malformed_body_is_422(client: AsyncClient, api) -> None:
    task = _task(api)
    response = await client.post(
        f"/api/v1/tasks/{task.id}/submit",
        json={"files": [{"label": "Recon"}]},
        headers=bearer(WORKER),
    )
    assert response.status_code == 422
    assert response.json()["error"] == "VALIDATION_ERROR"


async def test_domain_errors_map_to_status_codes(client: AsyncClient, api) -> None:
    task = _task(api)
    await client.post(
        f"/api/v1/tasks/{task.id}/submit", json={"notes": "x"}, headers=bearer(WORKER)
    )

    no_comment = await client.post(
        f"/api/v1/tasks/{task.id}/reject", json={}, headers=bearer(LEAD)
    )
    assert no_comment.status_code == 400
    assert no_comment.json()["details"]["field"] == "comment"

    worker_approves = await client.post(
        f"/api/v1/tasks/{task.id}/approve", headers=bearer(WORKER)
    )
    assert worker_approves.status_code == 403
    assert worker_approves.json()["error"] == "PERMISSION_DENIED"

    missing = await client.post("/api/v1/tasks/task-missing/approve", headers=bearer(LEAD))
    assert missing.status_code == 404

    resubmit = await client.post(
        f"/api/v1/tasks/{task.id}/submit", json={"notes": "again"}, headers=bearer(WORKER)
    )
    assert resubmit.status_code == 409
    assert resubmit.json()["error"] == "INVALID_STATE"


async def test_inactive_project_is_409(client: AsyncClient, api) -> None:
    task = _task(api)
    api.db.projects[task.project_id].status = ProjectStatus.COMPLETED
    response = await client.post(
        f"/api/v1/tasks/{task.id}/submit", json={"notes": "x"}, headers=bearer(WORKER)
    )
    assert response.status_code == 409
    assert response.json()["error"] == "PROJECT_NOT_ACTIVE"


async def test_client_round_trip_over_http(client: AsyncClient, api) -> None:
    task = _task(
        api, client_interact=ClientInteract.UPLOAD, approval_chain=[TeamRole.TEAM_LEADER]
    )
    submitted = await client.post(
        f"/api/v1/tasks/{task.id}/submit",
        json={"client_document_requests": [{"name": "Bank statement"}]},
        headers=bearer(WORKER),
    )
    assert submitted.status_code == 200

    approved = await client.post(f"/api/v1/tasks/{task.id}/approve", headers=bearer(LEAD))
    assert approved.json()["task"]["status"] == "Submitted to Client"
    assignment = approved.json()["assignment"]
    request_id = assignment["client_document_requests"][0]["id"]

    extra = await client.post(
        f"/api/v1/assignments/{assignment['id']}/document-requests",
        json={"items": [{"name": "Loan agreement", "description": "Signed"}]},
        headers=bearer(LEAD),
    )
    assert extra.status_code == 201
    extra_id = extra.json()[0]["id"]
    assert extra.json()[0]["is_fulfilled"] is False

    replied = await client.post(
        f"/api/v1/tasks/{task.id}/client-reply",
        json={
            "comment": "Statement attached",
            "uploads": [{"request_id": request_id, "file_path": "c/statement.pdf"}],
        },
        headers=bearer(CLIENT),
    )
    assert replied.status_code == 200
    assert replied.json()["assignment"]["client_comment"] == "Statement attached"

    early = await client.post(
        f"/api/v1/tasks/{task.id}/accept-client-documents", headers=bearer(LEAD)
    )
    assert early.status_code == 409

    fulfilled = await client.post(
        f"/api/v1/document-requests/{extra_id}/fulfill",
        json={"file_path": "c/loan.pdf"},
        headers=bearer(CLIENT),
    )
    assert fulfilled.status_code == 200
    assert fulfilled.json()["file_path"] == "c/loan.pdf"
    assert fulfilled.json()["uploaded_at"] is not None

    accepted = await client.post(
        f"/api/v1/tasks/{task.id}/accept-client-documents", headers=bearer(LEAD)
    )
    assert accepted.status_code == 200
    assert accepted.json()["task"]["status"] == "Completed"
    assert accepted.json()["task"]["completed_at"] is not None


async def test_request_reupload_and_history(client: AsyncClient, api) -> None:
    task = _task(
        api, client_interact=ClientInteract.UPLOAD, approval_chain=[TeamRole.TEAM_LEADER]
    )
    await client.post(
        f"/api/v1/tasks/{task.id}/submit",
        json={"notes": "n", "client_document_requests": [{"name": "Invoice"}]},
        headers=bearer(WORKER),
    )
    await client.post(f"/api/v1/tasks/{task.id}/approve", headers=bearer(LEAD))
    await client.post(
        f"/api/v1/tasks/{task.id}/client-reply",
        json={"comment": "See attached"},
        headers=bearer(CLIENT),
    )

    reupload = await client.post(
        f"/api/v1/tasks/{task.id}/request-reupload",
        json={"comment": "Wrong invoice"},
        headers=bearer(ADMIN),
    )
    assert reupload.status_code == 200
    assert reupload.json()["task"]["status"] == "Submitted to Client"

    history = await client.get(f"/api/v1/tasks/{task.id}/assignments", headers=bearer(WORKER))
    assert history.status_code == 200
    sequences = [a["sequence"] for a in history.json()]
    assert sequences == [2, 1]
    assert history.json()[1]["client_comment"] == "See attached"
    assert history.json()[0]["client_comment"] is None


async def test_document_request_endpoint_errors(client: AsyncClient, api) -> None:
    empty = await client.post(
        "/api/v1/assignments/asg-1/document-requests",
        json={"items": []},
        headers=bearer(LEAD),
    )
    assert empty.status_code == 422

    missing = await client.post(
        "/api/v1/assignments/asg-missing/document-requests",
        json={"items": [{"name": "Invoice"}]},
        headers=bearer(LEAD),
    )
    assert missing.status_code == 404

    worker_fulfills = await client.post(
        "/api/v1/document-requests/cdr-1/fulfill",
        json={"file_path": "x.pdf"},
        headers=bearer(WORKER),
    )
    assert worker_fulfills.status_code == 403
