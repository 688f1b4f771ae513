"""Presentation-layer dependency injection (composition root).

Routes depend only on these providers; use cases are built here from the
SQL repositories and the notification publisher on app.state.
"""

from workpaper.api.v1.dependencies.auth import actor_from_token, get_actor
from workpaper.api.v1.dependencies.dashboard import get_dashboard_aggregator
from workpaper.api.v1.dependencies.notifications import (
    get_notification_service,
    get_notification_service_for_write,
)
from workpaper.api.v1.dependencies.workflow import (
    build_workflow,
    get_assignment_store,
    get_document_request_ledger,
    get_notification_publisher,
    get_task_state_machine,
)

__all__ = [
    "actor_from_token",
    "build_workflow",
    "get_actor",
    "get_assignment_store",
    "get_dashboard_aggregator",
    "get_document_request_ledger",
    "get_notification_publisher",
    "get_notification_service",
    "get_notification_service_for_write",
    "get_task_state_machine",
]
