"""JWT access tokens carrying the actor context (sub, tenant_id, role).

Tokens are issued by the identity provider; workpaper trusts their claims
and does not look the user up.
"""

from datetime import timedelta
from typing import Any, cast

from jose import JWTError, jwt

from workpaper.core.config import get_settings
from workpaper.shared.utils.datetime import utc_now

REQUIRED_CLAIMS = ("sub", "tenant_id", "role")


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Encode claims into a signed JWT.

    Args:
        data: Claims to encode (sub, tenant_id, role).
        expires_delta: Optional TTL; defaults to settings.access_token_expire_minutes.
    """
    settings = get_settings()
    to_encode = data.copy()
    ttl = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    to_encode["exp"] = utc_now() + ttl
    encoded = jwt.encode(
        to_encode,
        settings.secret_key.get_secret_value(),
        algorithm=settings.algorithm,
    )
    return cast(str, encoded)


def verify_token(token: str) -> dict[str, Any]:
    """Verify signature and expiry and return the payload.

    Raises:
        ValueError: If the token is invalid, expired, or lacks sub, tenant_id or role.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.secret_key.get_secret_value(),
            algorithms=[settings.algorithm],
            options={"require_exp": True, "require_sub": True},
        )
    except JWTError as e:
        raise ValueError(f"Invalid token: {e!s}") from e
    for claim in REQUIRED_CLAIMS:
        if not payload.get(claim):
            raise ValueError(f"Token missing required claim: {claim}")
    return payload
