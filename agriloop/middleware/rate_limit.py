"""
Global rate limiting with slowapi.

One default limit applies to every route, keyed by the connecting address.
Forwarding headers are only honoured when the app sits behind a proxy that
overwrites them (``rate_limit_trust_proxy_headers``).
"""

from typing import Callable

from fastapi import FastAPI, Request
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from agriloop.config import Settings
from agriloop.dependencies import get_client_ip


def client_key_func(settings: Settings) -> Callable[[Request], str]:
    if not settings.rate_limit_trust_proxy_headers:
        return get_remote_address

    def proxied_client_key(request: Request) -> str:
        return get_client_ip(request) or "unknown"

    return proxied_client_key


def create_limiter(settings: Settings) -> Limiter:
    return Limiter(
        key_func=client_key_func(settings),
        default_limits=[settings.rate_limit_default],
        storage_uri=settings.rate_limit_storage_url,
        enabled=settings.rate_limit_enabled,
        headers_enabled=False,
    )


def setup_rate_limiting(app: FastAPI, settings: Settings) -> Limiter:
    """Attach the limiter, its middleware and the 429 handler to ``app``."""
    limiter = create_limiter(settings)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)
    return limiter
