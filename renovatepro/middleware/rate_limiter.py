"""Rate limiting middleware using a Redis sliding window.

Only the wizard actions that call the paid generation service are limited,
per client IP. Everything else passes straight through. If Redis cannot be
reached the request is allowed.
"""
import time
import redis
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from loguru import logger
from renovatepro.config import get_settings

RATE_LIMITED_PATHS = (
    "/analyze",
    "/smart-describe",
    "/generate",
    "/refine",
)


def is_rate_limited_path(path: str) -> bool:
    return path.startswith("/api/v1/wizard/") and path.endswith(RATE_LIMITED_PATHS)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Rate limits generation endpoints using a Redis sliding window counter."""

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if request.method != "POST" or not is_rate_limited_path(path):
            return await call_next(request)

        settings = get_settings()
        max_requests = settings.rate_limit_max_requests
        window_seconds = settings.rate_limit_window_seconds

        client_ip = request.client.host if request.client else "unknown"
        action = path.rsplit("/", 1)[-1]
        key = f"ratelimit:{client_ip}:{action}"

        try:
            r = redis.from_url(settings.redis_url)
            now = time.time()

            pipe = r.pipeline()
            pipe.zremrangebyscore(key, 0, now - window_seconds)
            pipe.zcard(key)
            pipe.zadd(key, {str(now): now})
            pipe.expire(key, window_seconds)
            results = pipe.execute()
            request_count = results[1]
        except redis.RedisError as e:
            logger.debug(f"Rate limiter Redis unavailable, allowing request: {e}")
            return await call_next(request)

        if request_count >= max_requests:
            logger.warning(
                f"Rate limit exceeded for {client_ip} on {action} "
                f"({request_count}/{max_requests} in {window_seconds}s)"
            )
            return JSONResponse(
                status_code=429,
                content={
                    "detail": {
                        "error": "Rate limit exceeded",
                        "limit": max_requests,
                        "window_seconds": window_seconds,
                        "retry_after": window_seconds,
                    }
                },
                headers={"Retry-After": str(window_seconds)},
            )

        return await call_next(request)
