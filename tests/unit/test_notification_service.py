"""NotificationService tests: listing, unread counts and read marks."""

import pytest
from fakes import CLIENT, LEAD, PROJECT, TENANT, WORKER, FakeNotificationRepository, InMemoryDB

from workpaper.application.use_cases import NotificationService
from workpaper.domain.enums import NotificationType
from workpaper.domain.exceptions import ResourceNotFoundException, ValidationException


async def _seed(repo: FakeNotificationRepository, user_id: str, **kwargs):
    defaults = {
        "type": NotificationType.ASSIGNMENT,
        "title": "Task Approved",
        "message": "Your task was approved",
        "url": None,
        "task_id": "task-1",
        "project_id": PROJECT,
        "data": {},
    }
    defaults.update(kwargs)
    rows = await repo.add_for_users(TENANT, [user_id], **defaults)
    return rows[0]


@pytest.fixture
def repo() -> FakeNotificationRepository:
    return FakeNotificationRepository(InMemoryDB())


@pytest.fixture
def service(repo) -> NotificationService:
    return NotificationService(repo, list_limit=2)


async def test_list_is_newest_first_limited_and_counts_all_unread(repo, service) -> None:
    first = await _seed(repo, WORKER.user_id, title="first")
    await _seed(repo, WORKER.user_id, title="second")
    third = await _seed(repo, WORKER.user_id, title="third")
    await _seed(repo, LEAD.user_id, title="not mine")

    page = await service.list_for_user(WORKER)

    assert [n.title for n in page.items] == ["third", "second"]
    assert page.items[0].id == third.id
    assert page.unread_count == 3
    assert first.id not in {n.id for n in page.items}


async def test_mark_read_sets_read_at_and_is_idempotent(repo, service) -> None:
    row = await _seed(repo, WORKER.user_id)

    marked = await service.mark_read(WORKER, row.id)
    assert marked.is_read
    first_read_at = marked.read_at

    again = await service.mark_read(WORKER, row.id)
    assert again.read_at == first_read_at
    assert await service.unread_count(WORKER) == 0


async def test_users_cannot_mark_others_notifications(repo, service) -> None:
    row = await _seed(repo, WORKER.user_id)
    with pytest.raises(ResourceNotFoundException):
        await service.mark_read(CLIENT, row.id)
    assert await service.unread_count(WORKER) == 1


async def test_mark_all_read_returns_changed_count(repo, service) -> None:
    already = await _seed(repo, WORKER.user_id)
    await _seed(repo, WORKER.user_id)
    await _seed(repo, WORKER.user_id)
    await service.mark_read(WORKER, already.id)

    assert await service.mark_all_read(WORKER) == 2
    assert await service.mark_all_read(WORKER) == 0
    assert await service.unread_count(WORKER) == 0


async def test_mark_read_by_context_filters_task_project_and_type(repo, service) -> None:
    await _seed(repo, WORKER.user_id, task_id="task-1")
    await _seed(repo, WORKER.user_id, task_id="task-1", type=NotificationType.ACTIVITY)
    await _seed(repo, WORKER.user_id, task_id="task-2")
    await _seed(repo, WORKER.user_id, task_id=None, project_id="p2")

    assert (
        await service.mark_read_by_context(
            WORKER, task_id="task-1", type=NotificationType.ACTIVITY
        )
        == 1
    )
    assert await service.mark_read_by_context(WORKER, task_id="task-1") == 1
    assert await service.mark_read_by_context(WORKER, project_id=PROJECT) == 1
    assert await service.unread_count(WORKER) == 1


async def test_mark_read_by_context_needs_task_or_project(service) -> None:
    with pytest.raises(ValidationException):
        await service.mark_read_by_context(WORKER, type=NotificationType.APPROVAL)
