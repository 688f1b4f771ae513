"""Logging configuration for workpaper."""

import logging
import sys

from workpaper.core.config import get_settings


def setup_logging() -> None:
    """Configure root logging to stdout.

    DEBUG when settings.debug is set, INFO otherwise.
    """
    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a module (pass __name__)."""
    return logging.getLogger(name)
