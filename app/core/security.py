"""
Core security utilities: per-client rate limiting and client identification.
"""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from fastapi import HTTPException, Request, status

from app.core.async_redis import async_redis_client

# Configure logging
logger = logging.getLogger(__name__)


@dataclass
class RateLimitInfo:
    """Rate limit information."""

    limit: int
    remaining: int
    reset_time: datetime
    retry_after: Optional[int] = None


class RateLimiter:
    """Fixed-window rate limiter backed by Redis counters."""

    def __init__(self, redis=None):
        self.redis = redis or async_redis_client

    async def check_rate_limit(self, identifier: str, limit: int, window_seconds: int, operation: str = "default") -> RateLimitInfo:
        """Count one request for an identifier and report the window state."""
        current_time = int(time.time())
        window = current_time // window_seconds
        window_reset = (window + 1) * window_seconds
        try:
            key = f"rate_limit:{operation}:{identifier}:{window}"
            count = await self.redis.incr(key)
            if count == 1:
                await self.redis.expire(key, window_seconds)

            if count > limit:
                return RateLimitInfo(
                    limit=limit,
                    remaining=0,
                    reset_time=datetime.fromtimestamp(window_reset, timezone.utc),
                    retry_after=max(window_reset - current_time, 1),
                )

            return RateLimitInfo(
                limit=limit,
                remaining=limit - count,
                reset_time=datetime.fromtimestamp(window_reset, timezone.utc),
            )

        except Exception as e:
            logger.error(f"Error checking rate limit: {e}", exc_info=True)
            # Return permissive rate limit on error
            return RateLimitInfo(limit=limit, remaining=limit, reset_time=datetime.fromtimestamp(window_reset, timezone.utc))

    async def enforce_rate_limit(self, identifier: str, limit: int, window_seconds: int, operation: str = "default") -> None:
        """Enforce rate limit, raise exception if exceeded."""
        rate_limit_info = await self.check_rate_limit(identifier, limit, window_seconds, operation)

        if rate_limit_info.retry_after:
            logger.warning(f"Rate limit exceeded for {operation} from {identifier}")
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many requests. Please try again later.",
                headers={
                    "X-RateLimit-Limit": str(rate_limit_info.limit),
                    "X-RateLimit-Remaining": str(rate_limit_info.remaining),
                    "X-RateLimit-Reset": str(int(rate_limit_info.reset_time.timestamp())),
                    "Retry-After": str(rate_limit_info.retry_after),
                },
            )


def get_client_ip(request: Request) -> str:
    """
    Get client IP address from request.
    Checks X-Forwarded-For header (for proxies) and falls back to direct client.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # X-Forwarded-For can contain multiple IPs, take the first one
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    if request.client:
        return request.client.host

    return "unknown"


# Global rate limiter instance
rate_limiter = RateLimiter()
