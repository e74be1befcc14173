"""Redis cache for Slack lookups that rarely change (user profiles)."""

import json
from typing import Any

import redis.asyncio as redis
from redis.asyncio import Redis

from attendbot.config import get_settings
from attendbot.utils.logging import get_logger

logger = get_logger(__name__)


class RedisCache:
    """Async Redis cache that degrades to a no-op when Redis is unreachable."""

    def __init__(self):
        self._client: Redis | None = None
        self._connected = False

    async def connect(self) -> None:
        """Connect to Redis server."""
        if self._connected:
            return

        settings = get_settings()
        if not settings.cache_enabled:
            logger.info("cache_disabled")
            return

        try:
            logger.info(
                "connecting_to_redis",
                host=settings.redis_host,
                port=settings.redis_port,
                db=settings.redis_db,
            )

            self._client = redis.Redis(
                host=settings.redis_host,
                port=settings.redis_port,
                db=settings.redis_db,
                password=settings.redis_password,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_keepalive=True,
            )

            await self._client.ping()
            self._connected = True
            logger.info("redis_connected")

        except Exception as e:
            # The bot keeps working without a cache, it just calls Slack more often
            logger.warning("redis_connection_failed", error=str(e))
            self._connected = False
            self._client = None

    async def disconnect(self) -> None:
        """Disconnect from Redis server."""
        if self._client and self._connected:
            await self._client.aclose()
            self._connected = False
            self._client = None
            logger.info("redis_disconnected")

    async def get(self, key: str) -> Any | None:
        """Get a JSON value from cache, or None if missing or unavailable."""
        if not self._connected or not self._client:
            return None

        try:
            value = await self._client.get(key)
            if value:
                logger.debug("cache_hit", key=key)
                return json.loads(value)
            logger.debug("cache_miss", key=key)
            return None
        except Exception as e:
            logger.warning("cache_get_failed", key=key, error=str(e))
            return None

    async def set(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """Store a JSON-serialisable value.

        Args:
            key: Cache key
            value: Value to cache
            ttl: Time to live in seconds (defaults to settings.redis_ttl)

        Returns:
            True if stored, False otherwise.
        """
        if not self._connected or not self._client:
            return False

        ttl = ttl or get_settings().redis_ttl

        try:
            result = await self._client.set(key, json.dumps(value), ex=ttl)
            logger.debug("cache_set", key=key, ttl=ttl)
            return bool(result)
        except Exception as e:
            logger.warning("cache_set_failed", key=key, error=str(e))
            return False


# Global cache instance
_cache: RedisCache | None = None


def get_cache() -> RedisCache:
    """Get the global cache instance."""
    global _cache
    if _cache is None:
        _cache = RedisCache()
    return _cache
