"""
HTTP middleware: error envelope, request logging, security headers and rate
limiting.
"""

import logging
import math
import time
import uuid
from collections import deque
from typing import Awaitable, Callable

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse

from scanstation.api.errors import server_error_response

logger = logging.getLogger("scanstation.access")

CallNext = Callable[[Request], Awaitable[Response]]

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "X-DNS-Prefetch-Control": "off",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "cross-origin",
    "Cross-Origin-Opener-Policy": "same-origin",
    "X-XSS-Protection": "0",
}

# Never rate limited
EXEMPT_PATHS = {"/healthz", "/docs", "/redoc", "/openapi.json"}


async def server_error_middleware(request: Request, call_next: CallNext) -> Response:
    """
    Turn an unhandled route exception into the 500 envelope.

    Registered innermost, so the response still passes through the logging
    and security header middleware.
    """
    try:
        return await call_next(request)
    except Exception as e:
        logger.error(
            f"Unhandled exception: {e}",
            exc_info=e,
            extra={"json_fields": {"method": request.method, "path": request.url.path}},
        )
        return server_error_response()


async def request_logging_middleware(request: Request, call_next: CallNext) -> Response:
    """Log every request with its status and latency, and tag it with an ID."""
    request_id = str(uuid.uuid4())[:8]
    start = time.perf_counter()

    response = await call_next(request)

    latency_ms = round((time.perf_counter() - start) * 1000, 2)
    logger.info(
        f"{request.method} {request.url.path} {response.status_code} {latency_ms}ms",
        extra={
            "json_fields": {
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "latency_ms": latency_ms,
                "client_ip": request.client.host if request.client else None,
            }
        },
    )
    response.headers["X-Request-ID"] = request_id
    return response


async def security_headers_middleware(request: Request, call_next: CallNext) -> Response:
    response = await call_next(request)
    for header, value in SECURITY_HEADERS.items():
        response.headers.setdefault(header, value)
    return response


class SlidingWindowRateLimiter:
    """
    Per-client request counter over a sliding time window.

    Only touched from the event loop, so no locking is needed. Clients
    with no hits left in the window are dropped, at most once per window.
    """

    def __init__(self, limit: int, window_seconds: float = 60.0, clock=time.monotonic):
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: dict[str, deque] = {}
        self._last_sweep = clock()

    def __len__(self) -> int:
        return len(self._hits)

    def _prune(self, hits: deque, now: float) -> None:
        while hits and hits[0] <= now - self.window_seconds:
            hits.popleft()

    def _sweep(self, now: float) -> None:
        for key in list(self._hits):
            self._prune(self._hits[key], now)
            if not self._hits[key]:
                del self._hits[key]
        self._last_sweep = now

    def hit(self, key: str) -> tuple[bool, int, int]:
        """
        Record a request for ``key``.

        Returns:
            Tuple of (allowed, remaining, reset_seconds)
        """
        now = self._clock()
        if now - self._last_sweep >= self.window_seconds:
            self._sweep(now)

        hits = self._hits.setdefault(key, deque())
        self._prune(hits, now)

        if len(hits) >= self.limit:
            reset = max(1, math.ceil(hits[0] + self.window_seconds - now))
            return False, 0, reset

        hits.append(now)
        reset = max(1, math.ceil(hits[0] + self.window_seconds - now))
        return True, self.limit - len(hits), reset


def rate_limit_middleware(limiter: SlidingWindowRateLimiter):
    """Build a middleware that rejects clients over the limit with 429."""

    async def middleware(request: Request, call_next: CallNext) -> Response:
        if request.url.path in EXEMPT_PATHS or request.method == "OPTIONS":
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        allowed, remaining, reset = limiter.hit(client_ip)
        headers = {
            "RateLimit-Limit": str(limiter.limit),
            "RateLimit-Remaining": str(remaining),
            "RateLimit-Reset": str(reset),
        }

        if not allowed:
            logger.warning(
                f"Rate limit exceeded for {client_ip} on {request.method} {request.url.path}"
            )
            headers["Retry-After"] = str(reset)
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    "error": "RATE_LIMITED",
                    "message": "Too many requests, please try again later.",
                },
                headers=headers,
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response

    return middleware
