"""
HTTP middleware and response hooks.

- error_middleware: JSON 404 document and JSON 500 for unexpected errors
- rate_limit_middleware: fixed-window request cap per client IP on /api/
- cors_middleware + cors hook: origin allow-list with credentials
- compression_middleware: gzip/deflate for JSON and HTML bodies
- security_headers hook: helmet-style headers on every response
"""

import logging
import time
import traceback
from typing import Callable

from aiohttp import web

from explorer.web.routes.status import AVAILABLE_ENDPOINTS

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
    "X-DNS-Prefetch-Control": "off",
}

COMPRESSIBLE_TYPES = ("application/json", "text/html", "text/css", "text/plain")


def error_middleware(debug: bool = False):
    """Build the outermost error handler; debug adds stack traces to 500s."""

    @web.middleware
    async def middleware(request: web.Request, handler):
        try:
            return await handler(request)
        except web.HTTPNotFound:
            return web.json_response(
                {
                    "error": "Endpoint not found",
                    "message": f"The endpoint {request.path_qs} does not exist",
                    "availableEndpoints": AVAILABLE_ENDPOINTS,
                },
                status=404,
            )
        except web.HTTPException:
            raise
        except Exception as e:
            logger.exception(f"Unhandled error on {request.method} {request.path}")
            body = {"error": True, "message": str(e) or "Internal Server Error"}
            if debug:
                body["stack"] = traceback.format_exc()
            return web.json_response(body, status=500)

    return middleware


class RateLimiter:
    """Fixed-window counter per client key."""

    def __init__(
        self,
        max_requests: int = 100,
        window_seconds: float = 15 * 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, tuple[float, int]] = {}

    def hit(self, key: str) -> tuple[bool, int]:
        """Count one request; returns (allowed, remaining)."""
        now = self._clock()
        started, count = self._windows.get(key, (now, 0))
        if now - started >= self.window_seconds:
            started, count = now, 0
        count += 1
        self._windows[key] = (started, count)
        if len(self._windows) > 10_000:
            self._purge(now)
        return count <= self.max_requests, max(0, self.max_requests - count)

    def _purge(self, now: float) -> None:
        self._windows = {
            k: v for k, v in self._windows.items()
            if now - v[0] < self.window_seconds
        }


def rate_limit_middleware(limiter: RateLimiter, prefix: str = "/api/"):

    @web.middleware
    async def middleware(request: web.Request, handler):
        if not request.path.startswith(prefix):
            return await handler(request)

        allowed, remaining = limiter.hit(request.remote or "unknown")
        if not allowed:
            logger.warning(f"Rate limit exceeded for {request.remote} on {request.path}")
            return web.json_response(
                {"success": False, "error": "Rate limit exceeded", "message": RATE_LIMIT_MESSAGE},
                status=429,
                headers={"RateLimit-Limit": str(limiter.max_requests), "RateLimit-Remaining": "0"},
            )

        response = await handler(request)
        response.headers["RateLimit-Limit"] = str(limiter.max_requests)
        response.headers["RateLimit-Remaining"] = str(remaining)
        return response

    return middleware


def cors_middleware(allowed_origins: list[str]):
    """Answer preflight requests for allowed origins before routing."""

    @web.middleware
    async def middleware(request: web.Request, handler):
        origin = request.headers.get("Origin")
        if (
            request.method == "OPTIONS"
            and origin in allowed_origins
            and "Access-Control-Request-Method" in request.headers
        ):
            return web.Response(
                status=204,
                headers={
                    "Access-Control-Allow-Methods": "GET, OPTIONS",
                    "Access-Control-Allow-Headers": request.headers.get(
                        "Access-Control-Request-Headers", "Content-Type",
                    ),
                    "Access-Control-Max-Age": "600",
                },
            )
        return await handler(request)

    return middleware


def cors_headers(allowed_origins: list[str]):
    """on_response_prepare hook adding CORS headers for allowed origins."""

    async def hook(request: web.Request, response: web.StreamResponse) -> None:
        origin = request.headers.get("Origin")
        if origin and origin in allowed_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers.add("Vary", "Origin")

    return hook


async def security_headers(request: web.Request, response: web.StreamResponse) -> None:
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)


@web.middleware
async def compression_middleware(request: web.Request, handler):
    response = await handler(request)
    if (
        isinstance(response, web.Response)
        and not response.prepared
        and response.content_type in COMPRESSIBLE_TYPES
    ):
        response.enable_compression()
    return response
