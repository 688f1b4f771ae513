"""Correlation ID middleware.

Uses the caller's X-Correlation-ID, else the request id set by
RequestIDMiddleware, else a fresh UUID. Must be added before
RequestIDMiddleware so it runs inside it.
"""

import uuid
from typing import Callable

from workpaper.middleware._headers import read_header, with_response_headers


def CorrelationIDMiddleware(
    app: Callable, header_name: str = "X-Correlation-ID"
) -> Callable:
    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        state = scope.setdefault("state", {})
        correlation_id = (
            read_header(scope, header_name)
            or state.get("request_id")
            or str(uuid.uuid4())
        )
        state["correlation_id"] = correlation_id
        await app(
            scope,
            receive,
            with_response_headers(send, [(header_name.encode(), correlation_id.encode())]),
        )

    return asgi_app
