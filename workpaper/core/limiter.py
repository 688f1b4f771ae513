"""Rate limiter instance for SlowAPI.

Shared so main (app.state.limiter) and route modules use the same
instance. Routes decorated with a limit must take a `request: Request`
parameter.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

WRITE_ENDPOINT_LIMIT = "120/minute"

limit_writes = limiter.limit(WRITE_ENDPOINT_LIMIT)
