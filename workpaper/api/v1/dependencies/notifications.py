"""Notification query and read-marking dependencies."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from workpaper.application.use_cases import NotificationService
from workpaper.core.config import get_settings
from workpaper.infrastructure.persistence.database import get_db, get_db_transactional
from workpaper.infrastructure.persistence.repositories import NotificationRepository


async def get_notification_service(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> NotificationService:
    """NotificationService for reads (list, unread count)."""
    return NotificationService(
        NotificationRepository(db), list_limit=get_settings().notification_list_limit
    )


async def get_notification_service_for_write(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> NotificationService:
    """NotificationService for mark-read operations (transactional)."""
    return NotificationService(
        NotificationRepository(db), list_limit=get_settings().notification_list_limit
    )
