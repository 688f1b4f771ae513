"""SQLAlchemy mixins shared by workpaper models.

CuidMixin, TenantMixin, TimestampMixin, VersionedMixin and the combined
MultiTenantModel, plus values_check() for enum-backed status columns.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func

from workpaper.shared.utils.generators import generate_cuid


class CuidMixin:
    """CUID string primary key."""

    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(String, primary_key=True, default=generate_cuid)


class TenantMixin:
    """tenant_id FK to tenant with CASCADE delete."""

    @declared_attr
    def tenant_id(cls) -> Mapped[str]:
        return mapped_column(
            String,
            ForeignKey("tenant.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )


class TimestampMixin:
    """created_at and updated_at (server defaults, timezone-aware)."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        )

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            server_default=func.now(),
            onupdate=func.now(),
            nullable=False,
        )


class VersionedMixin:
    """Optimistic-locking counter; compare-and-set writes bump it."""

    @declared_attr
    def version(cls) -> Mapped[int]:
        return mapped_column(Integer, default=1, server_default="1", nullable=False)


class MultiTenantModel(CuidMixin, TenantMixin, TimestampMixin):
    """CUID + tenant_id + created_at/updated_at."""

    __abstract__ = True


def values_check(column: str, enum: type[Enum], name: str) -> CheckConstraint:
    """CHECK constraint restricting column to the enum's values."""
    return CheckConstraint(
        "{} IN ({})".format(
            column,
            ", ".join("'{}'".format(str(m.value).replace("'", "''")) for m in enum),
        ),
        name=name,
    )
