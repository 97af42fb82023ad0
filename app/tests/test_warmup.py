"""
Tests for the startup warm-up.
"""

import pytest

from app.services.warmup import ServiceWarmup


class UnreachableStore:
    async def health_check(self):
        raise RuntimeError("no route to host")


@pytest.mark.asyncio
async def test_warm_up_reports_each_service(store, fake_redis):
    """Both services answering marks both ready."""
    warmup = ServiceWarmup(store=store, redis=fake_redis)

    assert await warmup.warm_up() == {"firebase": True, "redis": True}
    assert warmup.warmed_at is not None


@pytest.mark.asyncio
async def test_warm_up_never_raises(fake_redis):
    """A failing service is recorded as not ready instead of stopping startup."""
    fake_redis.fail_on.add("ping")
    warmup = ServiceWarmup(store=UnreachableStore(), redis=fake_redis)

    assert await warmup.warm_up() == {"firebase": False, "redis": False}
