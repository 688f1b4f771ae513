"""Request ID middleware.

Forwards a client X-Request-ID when it is short and log-safe, otherwise
mints a UUID. The id is stored on scope state and echoed on the response.
"""

import re
import uuid
from typing import Callable

from workpaper.middleware._headers import read_header, with_response_headers

REQUEST_ID_MAX_LENGTH = 64
_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9_-]{1,%d}$" % REQUEST_ID_MAX_LENGTH)


def sanitize_request_id(raw: str | None) -> str:
    candidate = (raw or "").strip()
    if _SAFE_REQUEST_ID.match(candidate):
        return candidate
    return str(uuid.uuid4())


def RequestIDMiddleware(app: Callable, header_name: str = "X-Request-ID") -> Callable:
    """Raw ASGI; http scopes only."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        request_id = sanitize_request_id(read_header(scope, header_name))
        scope.setdefault("state", {})["request_id"] = request_id
        await app(
            scope,
            receive,
            with_response_headers(send, [(header_name.encode(), request_id.encode())]),
        )

    return asgi_app
