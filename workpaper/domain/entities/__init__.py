"""Domain entities and aggregates.

Pure domain models; no ORM or persistence concerns.
"""

from workpaper.domain.entities.assignment import (
    AssignmentEntity,
    ClientDocumentRequestEntity,
    DocumentEntity,
    Fulfilled,
    Fulfillment,
    NoReply,
    Replied,
    ReplyState,
    Unfulfilled,
    fulfillment,
    reply_state,
)
from workpaper.domain.entities.notification import (
    ActivityEntity,
    NotificationEntity,
    Read,
    ReadState,
    Unread,
    read_state,
)
from workpaper.domain.entities.project import ProjectEntity, WorkingStepEntity
from workpaper.domain.entities.task import TaskEntity

__all__ = [
    "ActivityEntity",
    "AssignmentEntity",
    "ClientDocumentRequestEntity",
    "DocumentEntity",
    "Fulfilled",
    "Fulfillment",
    "NoReply",
    "NotificationEntity",
    "ProjectEntity",
    "Read",
    "ReadState",
    "Replied",
    "ReplyState",
    "TaskEntity",
    "Unfulfilled",
    "Unread",
    "WorkingStepEntity",
    "fulfillment",
    "read_state",
    "reply_state",
]
