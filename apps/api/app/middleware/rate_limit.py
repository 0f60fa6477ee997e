from __future__ import annotations

import time

import structlog
from fastapi import Request
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

from app.core.config import settings
from app.redis_client import count_hit

logger = structlog.get_logger(__name__)

REGISTRATION_PREFIX = "/v1/registrations"
WRITE_METHODS = {"POST", "PATCH", "DELETE"}

_WINDOWS = {
    "sec": 1,
    "second": 1,
    "seconds": 1,
    "min": 60,
    "minute": 60,
    "minutes": 60,
    "hour": 3600,
    "hours": 3600,
    "day": 86400,
    "days": 86400,
}


def parse_rate(rate: str) -> tuple[int, int]:
    """
    Parse formats like "60/minute", "120/hour" or "10/second".
    Returns: (limit, window_seconds)
    """
    raw = rate.strip().lower()
    if "/" not in raw:
        raise ValueError(f"Invalid rate format: {rate}")

    limit_str, window_str = raw.split("/", 1)
    limit = int(limit_str)
    window = _WINDOWS.get(window_str.strip())
    if window is None:
        raise ValueError(f"Invalid rate window: {window_str}")
    return limit, window


def rate_for(method: str, path: str) -> tuple[str, str]:
    """Pick the configured rate and the bucket scope for a request."""
    if method in WRITE_METHODS and path.startswith(REGISTRATION_PREFIX):
        # One bucket for all registration writes, whichever id is in the path
        return settings.rate_limit_registrations, f"{method}:{REGISTRATION_PREFIX}"
    return settings.rate_limit_default, f"{method}:{path}"


class RateLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        if not settings.rate_limit_enabled:
            return await call_next(request)

        if request.method == "OPTIONS":
            return await call_next(request)

        path = request.url.path
        if path in set(settings.rate_limit_exempt_paths):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        rate, scope = rate_for(request.method, path)

        try:
            limit, window_seconds = parse_rate(rate)
        except ValueError:
            logger.warning("rate_limit_misconfigured", rate=rate)
            return await call_next(request)

        now = int(time.time())
        bucket = now // window_seconds
        key = f"rl:{client_ip}:{scope}:{window_seconds}:{bucket}"

        try:
            count = count_hit(key, window_seconds)
        except RedisError:
            logger.warning("rate_limit_unavailable", scope=scope)
            return await call_next(request)

        remaining = max(0, limit - count)
        reset = (bucket + 1) * window_seconds

        if count > limit:
            logger.info("rate_limited", client_ip=client_ip, scope=scope)
            return JSONResponse(
                status_code=429,
                content={"detail": "rate limit exceeded"},
                headers={
                    "X-RateLimit-Limit": str(limit),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": str(reset),
                    "Retry-After": str(max(0, reset - now)),
                },
            )

        response = await call_next(request)
        response.headers.setdefault("X-RateLimit-Limit", str(limit))
        response.headers.setdefault("X-RateLimit-Remaining", str(remaining))
        response.headers.setdefault("X-RateLimit-Reset", str(reset))
        return response
