"""HTTP middleware: request logging, security headers, rate limiting."""

from agriloop.middleware.request_logging import RequestLoggingMiddleware
from agriloop.middleware.rate_limit import setup_rate_limiting
from agriloop.middleware.security import SecurityHeadersMiddleware

__all__ = [
    "RequestLoggingMiddleware",
    "SecurityHeadersMiddleware",
    "setup_rate_limiting",
]
