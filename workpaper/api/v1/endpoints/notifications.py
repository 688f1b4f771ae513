"""Notification API: list, unread count and read marking for the current user."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from workpaper.api.v1.dependencies import (
    get_actor,
    get_notification_service,
    get_notification_service_for_write,
)
from workpaper.application.dtos import ActorContext
from workpaper.application.use_cases import NotificationService
from workpaper.core.limiter import limit_writes
from workpaper.schemas.notification import (
    MarkedCountResponse,
    NotificationListResponse,
    NotificationResponse,
    ReadByContextRequest,
    UnreadCountResponse,
)

router = APIRouter()


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    actor: Annotated[ActorContext, Depends(get_actor)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
):
    """Newest notifications first, with the unread count."""
    page = await service.list_for_user(actor)
    return NotificationListResponse.model_validate(page)


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    actor: Annotated[ActorContext, Depends(get_actor)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
):
    return UnreadCountResponse(unread_count=await service.unread_count(actor))


@router.post("/read-all", response_model=MarkedCountResponse)
@limit_writes
async def mark_all_read(
    request: Request,
    actor: Annotated[ActorContext, Depends(get_actor)],
    service: Annotated[NotificationService, Depends(get_notification_service_for_write)],
):
    return MarkedCountResponse(updated=await service.mark_all_read(actor))


@router.post("/read-by-context", response_model=MarkedCountResponse)
@limit_writes
async def mark_read_by_context(
    request: Request,
    body: ReadByContextRequest,
    actor: Annotated[ActorContext, Depends(get_actor)],
    service: Annotated[NotificationService, Depends(get_notification_service_for_write)],
):
    """Mark read everything about a task or project (e.g. when the user opens it)."""
    updated = await service.mark_read_by_context(
        actor, type=body.type, task_id=body.task_id, project_id=body.project_id
    )
    return MarkedCountResponse(updated=updated)


@router.post("/{notification_id}/read", response_model=NotificationResponse)
@limit_writes
async def mark_read(
    request: Request,
    notification_id: str,
    actor: Annotated[ActorContext, Depends(get_actor)],
    service: Annotated[NotificationService, Depends(get_notification_service_for_write)],
):
    """Mark one notification read. Marking an already-read one is a no-op."""
    notification = await service.mark_read(actor, notification_id)
    return NotificationResponse.model_validate(notification)
