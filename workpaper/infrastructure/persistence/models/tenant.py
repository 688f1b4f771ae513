"""Tenant ORM model. Root of the multi-tenant hierarchy (no tenant_id)."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from workpaper.infrastructure.persistence.database import Base
from workpaper.infrastructure.persistence.models.mixins import CuidMixin, TimestampMixin


class Tenant(CuidMixin, TimestampMixin, Base):
    """A firm. Table: tenant."""

    __tablename__ = "tenant"

    code: Mapped[str] = mapped_column(String, unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
