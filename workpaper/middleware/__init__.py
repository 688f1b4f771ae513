"""HTTP middleware: request ID, correlation ID, security headers.

Applied in workpaper.main; the last one added is the outermost.
"""

from workpaper.middleware.correlation_id import CorrelationIDMiddleware
from workpaper.middleware.request_id import RequestIDMiddleware
from workpaper.middleware.security_headers import SecurityHeadersMiddleware

__all__ = [
    "CorrelationIDMiddleware",
    "RequestIDMiddleware",
    "SecurityHeadersMiddleware",
]
