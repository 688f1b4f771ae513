"""Client document request API: request documents and fulfill them."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from workpaper.api.v1.dependencies import get_actor, get_document_request_ledger
from workpaper.application.dtos import ActorContext
from workpaper.application.use_cases import DocumentRequestLedger
from workpaper.core.limiter import limit_writes
from workpaper.schemas.task import (
    ClientDocumentRequestResponse,
    DocumentRequestsCreate,
    FulfillRequest,
)

router = APIRouter()


@router.post(
    "/assignments/{assignment_id}/document-requests",
    response_model=list[ClientDocumentRequestResponse],
    status_code=201,
)
@limit_writes
async def create_document_requests(
    request: Request,
    assignment_id: str,
    body: DocumentRequestsCreate,
    actor: Annotated[ActorContext, Depends(get_actor)],
    ledger: Annotated[DocumentRequestLedger, Depends(get_document_request_ledger)],
):
    """Ask the client for documents on the task's latest assignment."""
    created = await ledger.request_documents(
        actor, assignment_id, [item.to_input() for item in body.items]
    )
    return [ClientDocumentRequestResponse.model_validate(r) for r in created]


@router.post(
    "/document-requests/{request_id}/fulfill",
    response_model=ClientDocumentRequestResponse,
)
@limit_writes
async def fulfill_document_request(
    request: Request,
    request_id: str,
    body: FulfillRequest,
    actor: Annotated[ActorContext, Depends(get_actor)],
    ledger: Annotated[DocumentRequestLedger, Depends(get_document_request_ledger)],
):
    """Record the client's upload for a request. Each request is fulfilled once."""
    fulfilled = await ledger.fulfill(actor, request_id, body.file_path)
    return ClientDocumentRequestResponse.model_validate(fulfilled)
