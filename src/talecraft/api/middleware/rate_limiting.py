"""Rate limiting middleware keyed by client IP.

Uses a sliding window algorithm with in-memory storage (Redis recommended
for multi-process deployments).
"""
import logging
import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

GENERAL_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."
AUTH_LIMIT_MESSAGE = "Too many authentication attempts, please try again later."


@dataclass
class RateLimitEntry:
    """Track rate limit usage for a single key."""

    requests: list[float] = field(default_factory=list)


class RateLimiter:
    """In-memory rate limiter using sliding window algorithm."""

    def __init__(
        self,
        limit: int,
        window_seconds: int = 900,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize rate limiter.

        Args:
            limit: Requests allowed per window
            window_seconds: Time window for rate limiting (default: 15 minutes)
            clock: Time source, injectable for tests
        """
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._entries: dict[str, RateLimitEntry] = defaultdict(RateLimitEntry)
        self._last_sweep = clock()

    @property
    def tracked_keys(self) -> int:
        return len(self._entries)

    def _sweep(self, now: float) -> None:
        """Forget every key with nothing left in the window, at most once per window."""
        if now - self._last_sweep < self.window_seconds:
            return
        window_start = now - self.window_seconds
        stale = [
            key
            for key, entry in self._entries.items()
            if not entry.requests or entry.requests[-1] <= window_start
        ]
        for key in stale:
            del self._entries[key]
        self._last_sweep = now

    def _prune(self, key: str, now: float) -> list[float]:
        """Return the key's in-window timestamps, forgetting the key if none remain."""
        self._sweep(now)
        entry = self._entries.get(key)
        if entry is None:
            return []
        window_start = now - self.window_seconds
        entry.requests = [ts for ts in entry.requests if ts > window_start]
        if not entry.requests:
            del self._entries[key]
        return entry.requests

    def is_allowed(self, key: str, record: bool = True) -> tuple[bool, dict[str, str]]:
        """Check if request is allowed under rate limit.

        Args:
            key: Unique identifier (client IP)
            record: Count this request against the window if allowed

        Returns:
            Tuple of (is_allowed, headers_dict with rate limit info)
        """
        now = self._clock()
        requests = self._prune(key, now)

        remaining = self.limit - len(requests)
        oldest = requests[0] if requests else now
        reset_time = int(oldest + self.window_seconds)

        headers = {
            "RateLimit-Limit": str(self.limit),
            "RateLimit-Remaining": str(max(0, remaining)),
            "RateLimit-Reset": str(max(0, reset_time - int(now))),
        }

        if remaining <= 0:
            headers["Retry-After"] = str(max(1, reset_time - int(now)))
            return False, headers

        if record:
            self._entries[key].requests.append(now)
            headers["RateLimit-Remaining"] = str(remaining - 1)
        return True, headers

    def record(self, key: str) -> None:
        """Count one request against ``key`` without checking the limit."""
        now = self._clock()
        self._prune(key, now)
        self._entries[key].requests.append(now)

    def get_usage(self, key: str) -> dict:
        """Get current usage stats for a key."""
        used = len(self._prune(key, self._clock()))
        return {
            "requests_used": used,
            "limit": self.limit,
            "remaining": max(0, self.limit - used),
        }


def client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Apply a general per-IP limit plus a stricter limit on auth endpoints.

    The auth limiter only counts unsuccessful attempts (status >= 400), so a
    user who logs in correctly is never locked out by their own successes.
    """

    def __init__(
        self,
        app: ASGIApp,
        general: RateLimiter,
        auth: RateLimiter,
        auth_paths: tuple[str, ...] = ("/api/auth/login", "/api/auth/register"),
        exempt_paths: tuple[str, ...] = ("/health",),
    ):
        super().__init__(app)
        self.general = general
        self.auth = auth
        self.auth_paths = auth_paths
        self.exempt_paths = exempt_paths

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request with rate limiting."""
        path = request.url.path
        if path.startswith(self.exempt_paths):
            return await call_next(request)

        key = client_key(request)
        is_allowed, headers = self.general.is_allowed(key)
        if not is_allowed:
            logger.warning("Rate limit exceeded for %s on %s", key, path)
            return self._rejected(GENERAL_LIMIT_MESSAGE, headers)

        is_auth_path = path in self.auth_paths
        if is_auth_path:
            auth_allowed, auth_headers = self.auth.is_allowed(key, record=False)
            if not auth_allowed:
                logger.warning("Auth rate limit exceeded for %s on %s", key, path)
                return self._rejected(AUTH_LIMIT_MESSAGE, auth_headers)

        response = await call_next(request)

        if is_auth_path and response.status_code >= 400:
            self.auth.record(key)

        for name, value in headers.items():
            response.headers[name] = value
        return response

    @staticmethod
    def _rejected(message: str, headers: dict[str, str]) -> JSONResponse:
        return JSONResponse(
            status_code=429,
            content={"success": False, "error": message},
            headers=headers,
        )
