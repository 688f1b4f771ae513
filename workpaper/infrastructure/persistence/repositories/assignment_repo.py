"""Assignment repository: the append-only submission log with conditional writes."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from workpaper.application.dtos.workflow import DocumentRequestInput, UploadedFile
from workpaper.domain.entities import (
    AssignmentEntity,
    ClientDocumentRequestEntity,
    DocumentEntity,
    fulfillment,
    reply_state,
)
from workpaper.domain.enums import TaskStatus
from workpaper.domain.exceptions import InvalidStateException, ResourceNotFoundException
from workpaper.infrastructure.persistence.models.assignment import (
    Assignment,
    ClientDocumentRequest,
    Document,
)
from workpaper.shared.utils.datetime import ensure_utc

logger = logging.getLogger(__name__)


def request_to_entity(r: ClientDocumentRequest) -> ClientDocumentRequestEntity:
    return ClientDocumentRequestEntity(
        id=r.id,
        assignment_id=r.assignment_id,
        name=r.name,
        description=r.description,
        state=fulfillment(r.file_path, ensure_utc(r.uploaded_at)),
    )


def _to_entity(a: Assignment) -> AssignmentEntity:
    return AssignmentEntity(
        id=a.id,
        tenant_id=a.tenant_id,
        task_id=a.task_id,
        sequence=a.sequence,
        worker_id=a.worker_id,
        notes=a.notes,
        status=TaskStatus(a.status),
        approval_level=a.approval_level,
        version=a.version,
        created_at=ensure_utc(a.created_at) or a.created_at,
        rejection_comment=a.rejection_comment,
        reply=reply_state(a.client_comment, ensure_utc(a.client_replied_at)),
        documents=[
            DocumentEntity(
                id=d.id,
                assignment_id=d.assignment_id,
                label=d.label,
                file_path=d.file_path,
                uploaded_at=ensure_utc(d.uploaded_at) or d.uploaded_at,
            )
            for d in a.documents
        ],
        client_document_requests=[request_to_entity(r) for r in a.client_document_requests],
    )


def _with_children():
    return select(Assignment).options(
        selectinload(Assignment.documents),
        selectinload(Assignment.client_document_requests),
    ).execution_options(populate_existing=True)


class AssignmentRepository:
    """Implements IAssignmentRepository."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get(self, tenant_id: str, assignment_id: str) -> AssignmentEntity | None:
        result = await self.db.execute(
            _with_children().where(
                Assignment.id == assignment_id, Assignment.tenant_id == tenant_id
            )
        )
        row = result.scalar_one_or_none()
        return _to_entity(row) if row else None

    async def get_latest(self, task_id: str) -> AssignmentEntity | None:
        result = await self.db.execute(
            _with_children()
            .where(Assignment.task_id == task_id)
            .order_by(Assignment.sequence.desc())
            .limit(1)
        )
        row = result.scalar_one_or_none()
        return _to_entity(row) if row else None

    async def list_for_task(self, task_id: str) -> list[AssignmentEntity]:
        result = await self.db.execute(
            _with_children()
            .where(Assignment.task_id == task_id)
            .order_by(Assignment.sequence.desc())
        )
        return [_to_entity(a) for a in result.scalars().all()]

    async def append(
        self,
        tenant_id: str,
        task_id: str,
        *,
        sequence: int,
        worker_id: str,
        notes: str | None,
        status: TaskStatus,
        approval_level: int,
        documents: list[UploadedFile],
        requests: list[DocumentRequestInput],
    ) -> AssignmentEntity:
        """Insert the assignment with its documents and requests in one savepoint.

        A taken (task_id, sequence) means another submission won the race.
        """
        assignment = Assignment(
            tenant_id=tenant_id,
            task_id=task_id,
            sequence=sequence,
            worker_id=worker_id,
            notes=notes,
            status=status.value,
            approval_level=approval_level,
        )
        try:
            async with self.db.begin_nested():
                self.db.add(assignment)
                await self.db.flush()
                for doc in documents:
                    self.db.add(
                        Document(
                            assignment_id=assignment.id,
                            label=doc.label,
                            file_path=doc.file_path,
                        )
                    )
                for item in requests:
                    self.db.add(
                        ClientDocumentRequest(
                            assignment_id=assignment.id,
                            name=item.name,
                            description=item.description,
                        )
                    )
                await self.db.flush()
        except IntegrityError as e:
            logger.info(
                "Assignment sequence %d already taken for task %s: %s", sequence, task_id, e
            )
            raise InvalidStateException(
                "Another submission for this task was recorded first; reload and retry",
                action="submit",
            ) from e
        created = await self.get(tenant_id, assignment.id)
        if created is None:
            raise ResourceNotFoundException("assignment", assignment.id)
        return created

    async def transition(
        self,
        assignment_id: str,
        *,
        expected_status: TaskStatus,
        expected_version: int,
        status: TaskStatus,
        approval_level: int | None = None,
        rejection_comment: str | None = None,
    ) -> bool:
        values: dict[str, object] = {
            "status": status.value,
            "version": Assignment.version + 1,
        }
        if approval_level is not None:
            values["approval_level"] = approval_level
        if rejection_comment is not None:
            values["rejection_comment"] = rejection_comment
        result = await self.db.execute(
            update(Assignment)
            .where(
                Assignment.id == assignment_id,
                Assignment.status == expected_status.value,
                Assignment.version == expected_version,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def record_client_reply(
        self, assignment_id: str, *, comment: str, replied_at: datetime
    ) -> bool:
        result = await self.db.execute(
            update(Assignment)
            .where(
                Assignment.id == assignment_id,
                Assignment.client_replied_at.is_(None),
                Assignment.status == TaskStatus.SUBMITTED_TO_CLIENT.value,
            )
            .values(
                client_comment=comment,
                client_replied_at=replied_at,
                status=TaskStatus.CLIENT_REPLY.value,
                version=Assignment.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
