"""User ORM model (tenant-scoped). Credentials live with the identity provider."""

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from workpaper.domain.enums import ActorRole
from workpaper.infrastructure.persistence.database import Base
from workpaper.infrastructure.persistence.models.mixins import (
    MultiTenantModel,
    values_check,
)


class User(MultiTenantModel, Base):
    """User. Table: app_user. Unique (tenant_id, username) and (tenant_id, email)."""

    __tablename__ = "app_user"

    username: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str] = mapped_column(String, nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("tenant_id", "username", name="uq_tenant_username"),
        UniqueConstraint("tenant_id", "email", name="uq_tenant_email"),
        values_check("role", ActorRole, "app_user_role_check"),
    )
