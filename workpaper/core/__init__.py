"""Core: settings and application bootstrap (lifespan, handlers, limiter)."""

from workpaper.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
