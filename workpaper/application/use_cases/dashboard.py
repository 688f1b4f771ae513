"""Dashboard aggregator: point-in-time counts for polling clients.

Nothing is cached; every call reads fresh counts scoped to the projects the
actor can see (the whole tenant for admins).
"""

from __future__ import annotations

from workpaper.application.dtos.actor import ActorContext
from workpaper.application.dtos.dashboard import DashboardSummary, PendingApproval
from workpaper.application.interfaces.repositories import (
    IActivityLogRepository,
    INotificationRepository,
    IProjectRepository,
    ITaskRepository,
)
from workpaper.domain.enums import ActorRole, CompletionStatus, TaskStatus, TeamRole
from workpaper.domain.exceptions import ValidationException
from workpaper.shared.utils.datetime import start_of_day_utc, utc_now

POLL_INTERVAL_MIN = 5
POLL_INTERVAL_MAX = 60

_OPEN = (CompletionStatus.PENDING, CompletionStatus.IN_PROGRESS)


def _may_act_on(pending: PendingApproval, team_role: TeamRole | None) -> bool:
    """Whether a member with team_role approves pending at its current level."""
    if team_role is None:
        return False
    chain = pending.approval_chain
    if pending.approval_level < len(chain):
        return team_role.value == chain[pending.approval_level]
    return team_role in TeamRole.approving()


class DashboardAggregator:
    """Builds DashboardSummary for the acting user."""

    def __init__(
        self,
        task_repo: ITaskRepository,
        project_repo: IProjectRepository,
        activity_repo: IActivityLogRepository,
        notification_repo: INotificationRepository,
        *,
        default_poll_interval: int = 10,
        recent_limit: int = 10,
    ) -> None:
        self.task_repo = task_repo
        self.project_repo = project_repo
        self.activity_repo = activity_repo
        self.notification_repo = notification_repo
        self.default_poll_interval = default_poll_interval
        self.recent_limit = recent_limit

    async def summarize(
        self, actor: ActorContext, poll_interval: int | None = None
    ) -> DashboardSummary:
        if poll_interval is None:
            poll_interval = self.default_poll_interval
        elif not POLL_INTERVAL_MIN <= poll_interval <= POLL_INTERVAL_MAX:
            raise ValidationException(
                f"poll_interval must be between {POLL_INTERVAL_MIN} and {POLL_INTERVAL_MAX} seconds",
                field="poll_interval",
            )

        now = utc_now()
        tenant_id = actor.tenant_id
        if actor.is_admin:
            memberships: dict[str, TeamRole] = {}
            project_ids = await self.project_repo.list_project_ids(tenant_id)
        else:
            memberships = await self.project_repo.get_memberships(tenant_id, actor.user_id)
            project_ids = list(memberships)

        pending = await self._pending_approvals(actor, project_ids, memberships)
        active = await self.task_repo.count_tasks(
            tenant_id,
            project_ids,
            completion=[CompletionStatus.IN_PROGRESS],
            worker_id=actor.user_id if actor.role == ActorRole.WORKER else None,
        )
        completed_today = await self.task_repo.count_tasks(
            tenant_id, project_ids, completed_since=start_of_day_utc(now)
        )
        overdue = await self.task_repo.count_tasks(
            tenant_id, project_ids, completion=_OPEN, overdue_at=now
        )
        recent = await self.activity_repo.list_recent(
            tenant_id, project_ids, self.recent_limit
        )
        unread = await self.notification_repo.count_unread(tenant_id, actor.user_id)

        return DashboardSummary(
            pending_approvals=pending,
            active_assignments=active,
            completed_today=completed_today,
            overdue_tasks=overdue,
            recent_activities=recent,
            projects_count=len(project_ids),
            unread_notifications=unread,
            last_updated=now,
            poll_interval_seconds=poll_interval,
        )

    async def _pending_approvals(
        self,
        actor: ActorContext,
        project_ids: list[str],
        memberships: dict[str, TeamRole],
    ) -> int:
        if actor.role == ActorRole.WORKER:
            return 0
        if actor.role == ActorRole.CLIENT:
            client_projects = [
                pid for pid, role in memberships.items() if role == TeamRole.CLIENT
            ]
            return await self.task_repo.count_tasks(
                actor.tenant_id,
                client_projects,
                statuses=[TaskStatus.SUBMITTED_TO_CLIENT],
            )
        pending = await self.task_repo.list_pending_approvals(actor.tenant_id, project_ids)
        if actor.is_admin:
            return len(pending)
        return sum(1 for p in pending if _may_act_on(p, memberships.get(p.project_id)))
