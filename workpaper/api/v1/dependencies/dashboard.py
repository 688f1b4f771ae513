"""Dashboard aggregator dependency (read-only session)."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from workpaper.application.use_cases import DashboardAggregator
from workpaper.core.config import get_settings
from workpaper.infrastructure.persistence.database import get_db
from workpaper.infrastructure.persistence.repositories import (
    ActivityLogRepository,
    NotificationRepository,
    ProjectRepository,
    TaskRepository,
)


async def get_dashboard_aggregator(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> DashboardAggregator:
    settings = get_settings()
    return DashboardAggregator(
        TaskRepository(db),
        ProjectRepository(db),
        ActivityLogRepository(db),
        NotificationRepository(db),
        default_poll_interval=settings.dashboard_poll_interval_seconds,
        recent_limit=settings.dashboard_recent_activity_limit,
    )
