"""Client document request repository (ledger rows)."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from workpaper.application.dtos.workflow import DocumentRequestInput
from workpaper.domain.entities import ClientDocumentRequestEntity
from workpaper.infrastructure.persistence.models.assignment import (
    Assignment,
    ClientDocumentRequest,
)
from workpaper.infrastructure.persistence.repositories.assignment_repo import (
    request_to_entity,
)


class DocumentRequestRepository:
    """Implements IDocumentRequestRepository."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def add(
        self,
        tenant_id: str,
        assignment_id: str,
        items: list[DocumentRequestInput],
    ) -> list[ClientDocumentRequestEntity]:
        rows = [
            ClientDocumentRequest(
                assignment_id=assignment_id, name=item.name, description=item.description
            )
            for item in items
        ]
        self.db.add_all(rows)
        await self.db.flush()
        return [request_to_entity(r) for r in rows]

    async def get(
        self, tenant_id: str, request_id: str
    ) -> ClientDocumentRequestEntity | None:
        result = await self.db.execute(
            select(ClientDocumentRequest)
            .join(Assignment, Assignment.id == ClientDocumentRequest.assignment_id)
            .where(ClientDocumentRequest.id == request_id, Assignment.tenant_id == tenant_id)
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        return request_to_entity(row) if row else None

    async def list_for_assignment(
        self, assignment_id: str
    ) -> list[ClientDocumentRequestEntity]:
        result = await self.db.execute(
            select(ClientDocumentRequest)
            .where(ClientDocumentRequest.assignment_id == assignment_id)
            .order_by(ClientDocumentRequest.created_at)
            .execution_options(populate_existing=True)
        )
        return [request_to_entity(r) for r in result.scalars().all()]

    async def fulfill(
        self, request_id: str, *, file_path: str, uploaded_at: datetime
    ) -> bool:
        """UPDATE ... WHERE file_path IS NULL; False when someone fulfilled it first."""
        result = await self.db.execute(
            update(ClientDocumentRequest)
            .where(
                ClientDocumentRequest.id == request_id,
                ClientDocumentRequest.file_path.is_(None),
            )
            .values(file_path=file_path, uploaded_at=uploaded_at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
