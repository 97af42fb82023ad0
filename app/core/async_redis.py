"""
Async Redis client wrapper with connection pooling.
Backs the session registry and the per-IP rate limiter.
"""

import json
import logging
from typing import Any, Optional

import redis.asyncio as aioredis

logger = logging.getLogger(__name__)


class AsyncRedisClient:
    """
    Async Redis client with connection pooling.

    The underlying client is created lazily on first use so importing the
    application never opens a connection.
    """

    def __init__(self, redis_url: Optional[str] = None):
        from app.core.config import REDIS_URL

        self.redis_url = redis_url if redis_url is not None else REDIS_URL
        self._client: Optional[aioredis.Redis] = None

    async def get_client(self) -> aioredis.Redis:
        """Get or create Redis client with connection pool."""
        if self._client is None:
            try:
                self._client = aioredis.from_url(
                    self.redis_url,
                    encoding="utf-8",
                    decode_responses=True,
                    max_connections=100,
                    socket_connect_timeout=5,
                    socket_keepalive=True,
                    health_check_interval=30,
                    retry_on_timeout=True,
                )
                logger.info("Async Redis client initialized with connection pool")
            except Exception as e:
                logger.error(f"Failed to initialize async Redis client: {e}")
                raise
        return self._client

    # Basic operations
    async def get(self, key: str) -> Optional[str]:
        """Get value from Redis."""
        client = await self.get_client()
        return await client.get(key)

    async def setex(self, key: str, ttl: int, value: str):
        """Set value in Redis with TTL (in seconds)."""
        client = await self.get_client()
        await client.setex(key, ttl, value)

    async def delete(self, *keys: str) -> int:
        """Delete one or more keys. Returns number of keys deleted."""
        client = await self.get_client()
        return await client.delete(*keys)

    async def incr(self, key: str) -> int:
        """Increment a counter, creating it at 1 when missing."""
        client = await self.get_client()
        return await client.incr(key)

    async def expire(self, key: str, seconds: int) -> bool:
        """Set expiration time for a key."""
        client = await self.get_client()
        return await client.expire(key, seconds)

    # JSON operations
    async def get_json(self, key: str) -> Optional[Any]:
        """Get JSON value from Redis."""
        value = await self.get(key)
        if value:
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                logger.error(f"Failed to decode JSON for key: {key}")
                return None
        return None

    async def set_json(self, key: str, value: Any, ttl: int):
        """Set JSON value in Redis with TTL (in seconds)."""
        await self.setex(key, ttl, json.dumps(value))

    # Info and stats
    async def ping(self) -> bool:
        """Ping Redis server."""
        try:
            client = await self.get_client()
            return await client.ping()
        except Exception as e:
            logger.error(f"Redis ping failed: {e}")
            return False

    # Cleanup
    async def close(self):
        """Close Redis connection."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("Async Redis client closed")


# Global async Redis client instance
async_redis_client = AsyncRedisClient()
