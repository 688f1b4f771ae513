"""Application DTOs (no ORM dependency)."""

from workpaper.application.dtos.actor import ActorContext
from workpaper.application.dtos.dashboard import (
    DashboardSummary,
    NotificationPage,
    PendingApproval,
)
from workpaper.application.dtos.workflow import (
    ClientUpload,
    DocumentRequestInput,
    SubmitCommand,
    TransitionResult,
    UploadedFile,
)

__all__ = [
    "ActorContext",
    "ClientUpload",
    "DashboardSummary",
    "DocumentRequestInput",
    "NotificationPage",
    "PendingApproval",
    "SubmitCommand",
    "TransitionResult",
    "UploadedFile",
]
