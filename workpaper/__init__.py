"""workpaper: multi-tenant audit engagement task workflow service."""

__version__ = "0.1.0"
