"""Task workflow dependencies: state machine, assignment store, document ledger.

Write paths share one transactional session per request, so every
repository and the notification dispatcher write inside the same
transaction as the transition.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from workpaper.application.interfaces.services import INotificationPublisher
from workpaper.application.services import NotificationDispatcher, TaskAccessService
from workpaper.application.use_cases import (
    AssignmentStore,
    DocumentRequestLedger,
    TaskStateMachine,
)
from workpaper.infrastructure.persistence.database import get_db, get_db_transactional
from workpaper.infrastructure.persistence.repositories import (
    ActivityLogRepository,
    AssignmentRepository,
    DocumentRequestRepository,
    NotificationRepository,
    ProjectRepository,
    TaskRepository,
)


def get_notification_publisher(request: Request) -> INotificationPublisher | None:
    """Publisher set by the lifespan (Redis or in-process); None before startup."""
    return getattr(request.app.state, "notification_publisher", None)


@dataclass
class _WorkflowComponents:
    ledger: DocumentRequestLedger
    store: AssignmentStore
    machine: TaskStateMachine


def build_workflow(
    db: AsyncSession, publisher: INotificationPublisher | None = None
) -> _WorkflowComponents:
    """Wire repositories and use cases on one session."""
    task_repo = TaskRepository(db)
    project_repo = ProjectRepository(db)
    assignment_repo = AssignmentRepository(db)
    access = TaskAccessService(project_repo, task_repo)
    dispatcher = NotificationDispatcher(NotificationRepository(db), publisher)
    ledger = DocumentRequestLedger(
        DocumentRequestRepository(db),
        assignment_repo,
        task_repo,
        project_repo,
        access,
        dispatcher,
    )
    store = AssignmentStore(assignment_repo, task_repo, ledger, access)
    machine = TaskStateMachine(
        task_repo,
        assignment_repo,
        project_repo,
        ActivityLogRepository(db),
        access,
        store,
        ledger,
        dispatcher,
    )
    return _WorkflowComponents(ledger=ledger, store=store, machine=machine)


async def get_task_state_machine(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    publisher: Annotated[
        INotificationPublisher | None, Depends(get_notification_publisher)
    ],
) -> TaskStateMachine:
    return build_workflow(db, publisher).machine


async def get_document_request_ledger(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    publisher: Annotated[
        INotificationPublisher | None, Depends(get_notification_publisher)
    ],
) -> DocumentRequestLedger:
    return build_workflow(db, publisher).ledger


async def get_assignment_store(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AssignmentStore:
    """Read-only store for assignment history."""
    return build_workflow(db).store
