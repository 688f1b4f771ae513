"""Seed a dev tenant with one engagement and print bearer tokens for each role.

Creates (idempotently, by tenant code) a tenant, five users (admin, two
approvers, worker, client), one project with team members, two working
steps (the second locked) and a few tasks covering each client_interact
mode. Tokens are minted with the configured SECRET_KEY.

Usage:
    python -m scripts.seed_dev_data [tenant-code]

Requires: DATABASE_URL (Postgres) and a migrated DB (alembic upgrade head).
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from workpaper.domain.enums import ActorRole, ClientInteract, TeamRole


def _project_root() -> Path:
    return Path(__file__).resolve().parent.parent


def _load_env() -> None:
    """Load .env from project root so get_settings() sees DATABASE_* when run as script."""
    load_dotenv(_project_root() / ".env", override=True)


_USERS = [
    ("admin", ActorRole.ADMIN, None),
    ("lead", ActorRole.APPROVER, TeamRole.TEAM_LEADER),
    ("partner", ActorRole.APPROVER, TeamRole.PARTNER),
    ("worker", ActorRole.WORKER, TeamRole.WORKER),
    ("client", ActorRole.CLIENT, TeamRole.CLIENT),
]

_TASKS = [
    ("Planning memo", ClientInteract.READ_ONLY, 0),
    ("Management representation letter", ClientInteract.COMMENT, 0),
    ("Bank confirmations", ClientInteract.UPLOAD, 0),
    ("Final report", ClientInteract.READ_ONLY, 1),
]


async def _seed(session: AsyncSession, code: str) -> dict[str, tuple[str, ActorRole]]:
    from workpaper.infrastructure.persistence.models import (
        Project,
        ProjectMember,
        Task,
        TaskWorker,
        Tenant,
        User,
        WorkingStep,
    )

    existing = (
        await session.execute(select(Tenant).where(Tenant.code == code))
    ).scalar_one_or_none()
    if existing is not None:
        rows = (
            await session.execute(select(User).where(User.tenant_id == existing.id))
        ).scalars()
        return {u.username: (u.id, ActorRole(u.role)) for u in rows}

    tenant = Tenant(code=code, name=f"Dev firm {code}")
    session.add(tenant)
    await session.flush()

    users: dict[str, User] = {}
    for username, role, _ in _USERS:
        user = User(
            tenant_id=tenant.id,
            username=username,
            email=f"{username}@{code}.example",
            role=role.value,
        )
        session.add(user)
        users[username] = user
    await session.flush()

    project = Project(tenant_id=tenant.id, name="FY2025 statutory audit", client_name="Acme Ltd")
    session.add(project)
    await session.flush()
    for username, _, team_role in _USERS:
        if team_role is not None:
            session.add(
                ProjectMember(
                    project_id=project.id, user_id=users[username].id, team_role=team_role.value
                )
            )

    steps = [
        WorkingStep(project_id=project.id, name="Fieldwork", order=1, is_locked=False),
        WorkingStep(project_id=project.id, name="Reporting", order=2, is_locked=True),
    ]
    session.add_all(steps)
    await session.flush()

    chain = [TeamRole.TEAM_LEADER.value, TeamRole.PARTNER.value]
    for order, (name, interact, step_index) in enumerate(_TASKS):
        task = Task(
            tenant_id=tenant.id,
            project_id=project.id,
            working_step_id=steps[step_index].id,
            name=name,
            order=order,
            client_interact=interact.value,
            multiple_files=interact == ClientInteract.UPLOAD,
            approval_chain=chain,
        )
        session.add(task)
        await session.flush()
        session.add(TaskWorker(task_id=task.id, user_id=users["worker"].id))

    return {name: (u.id, ActorRole(u.role)) for name, u in users.items()}


async def main(code: str) -> None:
    _load_env()
    from workpaper.core.config import get_settings
    from workpaper.infrastructure.persistence import database
    from workpaper.infrastructure.security.jwt import create_access_token

    get_settings.cache_clear()
    database._ensure_engine()
    if database.AsyncSessionLocal is None:
        print("DATABASE_BACKEND must be postgres with DATABASE_URL set.", file=sys.stderr)
        sys.exit(1)

    async with database.AsyncSessionLocal() as session:
        async with session.begin():
            users = await _seed(session, code)
            tenant_id = await _tenant_id(session, code)

    print(f"Tenant {code} ({tenant_id})")
    for username, (user_id, role) in users.items():
        token = create_access_token({"sub": user_id, "tenant_id": tenant_id, "role": role.value})
        print(f"{username:8} {role.value:9} {token}")
    await database.engine.dispose()


async def _tenant_id(session: AsyncSession, code: str) -> str:
    from workpaper.infrastructure.persistence.models import Tenant

    return (await session.execute(select(Tenant.id).where(Tenant.code == code))).scalar_one()


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "dev"))
