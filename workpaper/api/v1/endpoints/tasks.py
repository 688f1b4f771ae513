"""Task workflow API: thin routes delegating to TaskStateMachine."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from workpaper.api.v1.dependencies import (
    get_actor,
    get_assignment_store,
    get_task_state_machine,
)
from workpaper.application.dtos import ActorContext
from workpaper.application.use_cases import AssignmentStore, TaskStateMachine
from workpaper.core.limiter import limit_writes
from workpaper.schemas.task import (
    AssignmentResponse,
    ClientReplyRequest,
    CommentRequest,
    SubmitRequest,
    TransitionResponse,
)

router = APIRouter()


@router.post("/{task_id}/submit", response_model=TransitionResponse)
@limit_writes
async def submit_task(
    request: Request,
    task_id: str,
    body: SubmitRequest,
    actor: Annotated[ActorContext, Depends(get_actor)],
    machine: Annotated[TaskStateMachine, Depends(get_task_state_machine)],
):
    """Worker submits work; creates the next assignment and notifies level-0 approvers."""
    result = await machine.submit(actor, task_id, body.to_command())
    return TransitionResponse.model_validate(result)


@router.post("/{task_id}/approve", response_model=TransitionResponse)
@limit_writes
async def approve_task(
    request: Request,
    task_id: str,
    actor: Annotated[ActorContext, Depends(get_actor)],
    machine: Annotated[TaskStateMachine, Depends(get_task_state_machine)],
):
    """Approve at the current level (next level, client, or completion)."""
    result = await machine.approve(actor, task_id)
    return TransitionResponse.model_validate(result)


@router.post("/{task_id}/reject", response_model=TransitionResponse)
@limit_writes
async def reject_task(
    request: Request,
    task_id: str,
    body: CommentRequest,
    actor: Annotated[ActorContext, Depends(get_actor)],
    machine: Annotated[TaskStateMachine, Depends(get_task_state_machine)],
):
    """Return the task to the worker. A comment is required."""
    result = await machine.reject(actor, task_id, body.comment)
    return TransitionResponse.model_validate(result)


@router.post("/{task_id}/client-reply", response_model=TransitionResponse)
@limit_writes
async def client_reply(
    request: Request,
    task_id: str,
    body: ClientReplyRequest,
    actor: Annotated[ActorContext, Depends(get_actor)],
    machine: Annotated[TaskStateMachine, Depends(get_task_state_machine)],
):
    """Client answers with a comment and/or uploads against document requests."""
    result = await machine.client_reply(actor, task_id, body.comment, body.to_uploads())
    return TransitionResponse.model_validate(result)


@router.post("/{task_id}/accept-client-documents", response_model=TransitionResponse)
@limit_writes
async def accept_client_documents(
    request: Request,
    task_id: str,
    actor: Annotated[ActorContext, Depends(get_actor)],
    machine: Annotated[TaskStateMachine, Depends(get_task_state_machine)],
):
    """Complete the task once every client document request is fulfilled."""
    result = await machine.accept_client_documents(actor, task_id)
    return TransitionResponse.model_validate(result)


@router.post("/{task_id}/request-reupload", response_model=TransitionResponse)
@limit_writes
async def request_reupload(
    request: Request,
    task_id: str,
    body: CommentRequest,
    actor: Annotated[ActorContext, Depends(get_actor)],
    machine: Annotated[TaskStateMachine, Depends(get_task_state_machine)],
):
    """Send the task back to the client with a new assignment and a comment."""
    result = await machine.request_reupload(actor, task_id, body.comment)
    return TransitionResponse.model_validate(result)


@router.get("/{task_id}/assignments", response_model=list[AssignmentResponse])
async def list_assignments(
    task_id: str,
    actor: Annotated[ActorContext, Depends(get_actor)],
    store: Annotated[AssignmentStore, Depends(get_assignment_store)],
):
    """Assignment history for the task, most recent first."""
    history = await store.get_history(actor, task_id)
    return [AssignmentResponse.model_validate(a) for a in history]
