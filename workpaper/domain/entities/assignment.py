"""Assignment, worker document and client document request entities.

One-shot fields are modeled as small state types instead of nullable
columns: a client reply is NoReply or Replied, a document request is
Unfulfilled or Fulfilled. Transitions only go from the first to the second.
"""

from dataclasses import dataclass, field
from datetime import datetime

from workpaper.domain.enums import TaskStatus


@dataclass(frozen=True)
class NoReply:
    """The client has not replied to this assignment."""


@dataclass(frozen=True)
class Replied:
    comment: str
    replied_at: datetime


ReplyState = NoReply | Replied


@dataclass(frozen=True)
class Unfulfilled:
    """The client has not uploaded the requested document."""


@dataclass(frozen=True)
class Fulfilled:
    file_path: str
    uploaded_at: datetime


Fulfillment = Unfulfilled | Fulfilled


def reply_state(comment: str | None, replied_at: datetime | None) -> ReplyState:
    """Build a ReplyState from the persisted column pair."""
    if replied_at is None:
        return NoReply()
    return Replied(comment=comment or "", replied_at=replied_at)


def fulfillment(file_path: str | None, uploaded_at: datetime | None) -> Fulfillment:
    """Build a Fulfillment from the persisted column pair (both set or both null)."""
    if (file_path is None) != (uploaded_at is None):
        raise ValueError("file_path and uploaded_at must be set together")
    if file_path is None or uploaded_at is None:
        return Unfulfilled()
    return Fulfilled(file_path=file_path, uploaded_at=uploaded_at)


@dataclass
class DocumentEntity:
    """File uploaded by a worker with a submission. Never mutated."""

    id: str
    assignment_id: str
    label: str
    file_path: str
    uploaded_at: datetime


@dataclass
class ClientDocumentRequestEntity:
    """Named document requested from the client on one assignment."""

    id: str
    assignment_id: str
    name: str
    description: str | None
    state: Fulfillment = field(default_factory=Unfulfilled)

    @property
    def is_fulfilled(self) -> bool:
        return isinstance(self.state, Fulfilled)

    @property
    def file_path(self) -> str | None:
        return self.state.file_path if isinstance(self.state, Fulfilled) else None

    @property
    def uploaded_at(self) -> datetime | None:
        return self.state.uploaded_at if isinstance(self.state, Fulfilled) else None


@dataclass
class AssignmentEntity:
    """One submission attempt against a task.

    sequence orders the append-only log per task; the assignment with the
    highest sequence is the latest and the only one mutated in place.
    """

    id: str
    tenant_id: str
    task_id: str
    sequence: int
    worker_id: str
    notes: str | None
    status: TaskStatus
    approval_level: int
    version: int
    created_at: datetime
    rejection_comment: str | None = None
    reply: ReplyState = field(default_factory=NoReply)
    documents: list[DocumentEntity] = field(default_factory=list)
    client_document_requests: list[ClientDocumentRequestEntity] = field(
        default_factory=list
    )

    @property
    def has_client_reply(self) -> bool:
        return isinstance(self.reply, Replied)

    @property
    def client_comment(self) -> str | None:
        return self.reply.comment if isinstance(self.reply, Replied) else None

    @property
    def client_replied_at(self) -> datetime | None:
        return self.reply.replied_at if isinstance(self.reply, Replied) else None

    def all_requests_fulfilled(self) -> bool:
        """True when every client document request is fulfilled (vacuously true for none)."""
        return all(r.is_fulfilled for r in self.client_document_requests)
