"""Primary key generator (CUID2)."""

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()


def generate_cuid() -> str:
    """Return a new collision-resistant id for a row primary key."""
    value = cuid_generator()
    if not isinstance(value, str):
        raise TypeError(f"Expected str from cuid_generator, got {type(value).__name__}")
    return value
