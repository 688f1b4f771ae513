"""Security: JWT verification for the actor context."""

from workpaper.infrastructure.security.jwt import create_access_token, verify_token

__all__ = ["create_access_token", "verify_token"]
