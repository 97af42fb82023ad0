"""
Tests for the per-client rate limiter.
"""

import pytest
from fastapi import HTTPException

from app.core.security import RateLimiter


@pytest.mark.asyncio
async def test_rate_limit_counts_within_window(fake_redis):
    """Requests are counted until the limit is exceeded."""
    limiter = RateLimiter(redis=fake_redis)

    first = await limiter.check_rate_limit("1.2.3.4", limit=2, window_seconds=60, operation="auth_login")
    second = await limiter.check_rate_limit("1.2.3.4", limit=2, window_seconds=60, operation="auth_login")
    third = await limiter.check_rate_limit("1.2.3.4", limit=2, window_seconds=60, operation="auth_login")

    assert (first.remaining, second.remaining) == (1, 0)
    assert third.retry_after is not None


@pytest.mark.asyncio
async def test_enforce_rate_limit_raises_429(fake_redis):
    """Exceeding the limit raises a 429 with retry headers."""
    limiter = RateLimiter(redis=fake_redis)
    await limiter.enforce_rate_limit("1.2.3.4", limit=1, window_seconds=60)

    with pytest.raises(HTTPException) as exc_info:
        await limiter.enforce_rate_limit("1.2.3.4", limit=1, window_seconds=60)

    assert exc_info.value.status_code == 429
    assert "Retry-After" in exc_info.value.headers


@pytest.mark.asyncio
async def test_rate_limit_fails_open_without_redis(fake_redis):
    """An unreachable Redis never blocks requests."""
    fake_redis.fail_on.add("incr")
    limiter = RateLimiter(redis=fake_redis)

    info = await limiter.check_rate_limit("1.2.3.4", limit=1, window_seconds=60)

    assert info.retry_after is None
    assert info.remaining == 1
