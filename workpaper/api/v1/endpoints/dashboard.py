"""Dashboard API: polled summary counts."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from workpaper.api.v1.dependencies import get_actor, get_dashboard_aggregator
from workpaper.application.dtos import ActorContext
from workpaper.application.use_cases import DashboardAggregator
from workpaper.schemas.dashboard import DashboardSummaryResponse

router = APIRouter()


@router.get("/summary", response_model=DashboardSummaryResponse)
async def dashboard_summary(
    actor: Annotated[ActorContext, Depends(get_actor)],
    aggregator: Annotated[DashboardAggregator, Depends(get_dashboard_aggregator)],
    poll_interval: Annotated[
        int | None,
        Query(description="Seconds until the client polls again (5-60)"),
    ] = None,
):
    """Fresh counts for the caller; nothing is cached between polls."""
    summary = await aggregator.summarize(actor, poll_interval)
    return DashboardSummaryResponse.model_validate(summary)
