"""Acting user context passed explicitly into every core operation."""

from dataclasses import dataclass

from workpaper.domain.enums import ActorRole


@dataclass(frozen=True)
class ActorContext:
    """Who is acting: user id, tenant and role, taken from the verified token."""

    user_id: str
    tenant_id: str
    role: ActorRole

    @property
    def is_admin(self) -> bool:
        return self.role == ActorRole.ADMIN
