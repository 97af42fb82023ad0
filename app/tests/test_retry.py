"""
Tests for retry logic utilities.
"""
import pytest
import asyncio
from google.api_core.exceptions import ServiceUnavailable
from redis.exceptions import ConnectionError as RedisConnectionError

from app.core.retry import RetryConfig, retry_async, retry_firestore, retry_redis, retry_sync


def test_retry_sync_success_on_first_attempt():
    """Test that retry_sync works when function succeeds on first attempt."""
    call_count = {"count": 0}
    
    @retry_sync(max_attempts=3)
    def test_func():
        call_count["count"] += 1
        return "success"
    
    result = test_func()
    assert result == "success"
    assert call_count["count"] == 1


def test_retry_sync_success_on_retry():
    """Test that retry_sync retries and eventually succeeds."""
    call_count = {"count": 0}
    
    @retry_sync(max_attempts=3, delay=0.1)
    def test_func():
        call_count["count"] += 1
        if call_count["count"] < 3:
            raise ValueError("Temporary error")
        return "success"
    
    result = test_func()
    assert result == "success"
    assert call_count["count"] == 3


def test_retry_sync_max_attempts_exceeded():
    """Test that retry_sync raises exception after max attempts."""
    call_count = {"count": 0}
    
    @retry_sync(max_attempts=3, delay=0.1)
    def test_func():
        call_count["count"] += 1
        raise ValueError("Permanent error")
    
    with pytest.raises(ValueError):
        test_func()
    
    assert call_count["count"] == 3


@pytest.mark.asyncio
async def test_retry_async_success_on_first_attempt():
    """Test that retry_async works when function succeeds on first attempt."""
    call_count = {"count": 0}
    
    @retry_async(max_attempts=3)
    async def test_func():
        call_count["count"] += 1
        return "success"
    
    result = await test_func()
    assert result == "success"
    assert call_count["count"] == 1


@pytest.mark.asyncio
async def test_retry_async_success_on_retry():
    """Test that retry_async retries and eventually succeeds."""
    call_count = {"count": 0}
    
    @retry_async(max_attempts=3, delay=0.1)
    async def test_func():
        call_count["count"] += 1
        if call_count["count"] < 3:
            raise ValueError("Temporary error")
        return "success"
    
    result = await test_func()
    assert result == "success"
    assert call_count["count"] == 3


@pytest.mark.asyncio
async def test_retry_async_max_attempts_exceeded():
    """Test that retry_async raises exception after max attempts."""
    call_count = {"count": 0}
    
    @retry_async(max_attempts=3, delay=0.1)
    async def test_func():
        call_count["count"] += 1
        raise ValueError("Permanent error")
    
    with pytest.raises(ValueError):
        await test_func()
    
    assert call_count["count"] == 3


def test_retry_config_values():
    """Test that retry configuration values are set."""
    assert RetryConfig.FIRESTORE_MAX_ATTEMPTS > 0
    assert RetryConfig.REDIS_MAX_ATTEMPTS > 0


@pytest.mark.asyncio
async def test_retry_redis_only_retries_transient_errors(monkeypatch):
    """Redis connection errors are retried, other errors are not."""
    monkeypatch.setattr(RetryConfig, "REDIS_DELAY", 0.01)
    calls = {"transient": 0, "permanent": 0}

    @retry_redis
    async def flaky():
        calls["transient"] += 1
        if calls["transient"] < 2:
            raise RedisConnectionError("connection reset")
        return "ok"

    @retry_redis
    async def broken():
        calls["permanent"] += 1
        raise ValueError("bad payload")

    assert await flaky() == "ok"
    assert calls["transient"] == 2
    with pytest.raises(ValueError):
        await broken()
    assert calls["permanent"] == 1


def test_retry_firestore_retries_unavailable(monkeypatch):
    """Firestore reads retry when the service is briefly unavailable."""
    monkeypatch.setattr(RetryConfig, "FIRESTORE_DELAY", 0.01)
    calls = {"count": 0}

    @retry_firestore
    def query():
        calls["count"] += 1
        if calls["count"] == 1:
            raise ServiceUnavailable("try again")
        return []

    assert query() == []
    assert calls["count"] == 2
