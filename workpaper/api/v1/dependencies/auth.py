"""Actor context from the bearer token (composition root).

The token's sub, tenant_id and role are trusted as-is; there is no user
lookup per request.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from workpaper.application.dtos import ActorContext
from workpaper.domain.enums import ActorRole
from workpaper.domain.exceptions import AuthenticationException
from workpaper.infrastructure.security.jwt import verify_token

_http_bearer = HTTPBearer(auto_error=False)


def actor_from_token(token: str) -> ActorContext:
    """Verify token and build the ActorContext. Raises AuthenticationException."""
    try:
        payload = verify_token(token)
        role = ActorRole(payload["role"])
    except (ValueError, KeyError) as e:
        raise AuthenticationException(str(e)) from e
    return ActorContext(
        user_id=str(payload["sub"]),
        tenant_id=str(payload["tenant_id"]),
        role=role,
    )


async def get_actor(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
) -> ActorContext:
    """Current actor; 401 when the token is missing or invalid."""
    if credentials is None:
        raise AuthenticationException("Not authenticated")
    return actor_from_token(credentials.credentials)
