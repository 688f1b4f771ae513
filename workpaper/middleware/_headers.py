"""Raw ASGI header helpers shared by the middleware in this package."""

from typing import Callable

Send = Callable
Headers = list[tuple[bytes, bytes]]


def read_header(scope: dict, name: str) -> str | None:
    """First value of header name from an ASGI scope, or None."""
    wanted = name.lower().encode()
    for key, value in scope.get("headers", []):
        if key.lower() == wanted:
            return value.decode("utf-8", errors="replace")
    return None


def with_response_headers(send: Send, extra: Headers) -> Send:
    """Wrap send so http.response.start carries extra headers not already set."""

    async def wrapped(message: dict) -> None:
        if message["type"] == "http.response.start":
            headers = list(message.get("headers", []))
            present = {key.lower() for key, _ in headers}
            headers.extend(pair for pair in extra if pair[0].lower() not in present)
            message["headers"] = headers
        await send(message)

    return wrapped
