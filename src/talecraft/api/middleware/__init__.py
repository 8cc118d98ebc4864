"""Request interceptors.

The application's middleware is an explicit ordered list built by
:func:`build_middleware`; the first entry wraps all the others.

Interceptors:
- Security headers
- CORS
- Rate limiting (general and auth-specific)
"""

from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware import Middleware

from talecraft.core.config import Settings

from .rate_limiting import RateLimitMiddleware, RateLimiter
from .security_headers import SecurityHeadersMiddleware


def build_middleware(settings: Settings) -> list[Middleware]:
    """Build the ordered interceptor list for the application."""
    window = settings.rate_limit_window_seconds
    return [
        Middleware(SecurityHeadersMiddleware),
        Middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        ),
        Middleware(
            RateLimitMiddleware,
            general=RateLimiter(settings.rate_limit_requests, window),
            auth=RateLimiter(settings.auth_rate_limit_requests, window),
        ),
    ]


__all__ = [
    "RateLimitMiddleware",
    "RateLimiter",
    "SecurityHeadersMiddleware",
    "build_middleware",
]
