"""Security response headers for the JSON API. Raw ASGI."""

from typing import Callable

from workpaper.middleware._headers import with_response_headers

API_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Cache-Control": "no-store",
}


def SecurityHeadersMiddleware(
    app: Callable, headers: dict[str, str] | None = None
) -> Callable:
    """Add headers (default API_SECURITY_HEADERS) unless the response already set them."""
    pairs = [
        (name.encode(), value.encode())
        for name, value in (headers or API_SECURITY_HEADERS).items()
    ]

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        await app(scope, receive, with_response_headers(send, pairs))

    return asgi_app
