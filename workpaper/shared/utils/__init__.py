"""Shared utilities: UTC datetimes and id generation."""

from workpaper.shared.utils.datetime import ensure_utc, start_of_day_utc, utc_now
from workpaper.shared.utils.generators import generate_cuid

__all__ = [
    "ensure_utc",
    "generate_cuid",
    "start_of_day_utc",
    "utc_now",
]
