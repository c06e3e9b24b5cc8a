"""
Redis cache layer for rate limiting and short-lived aggregates.

Provides:
- Namespaced get/set/delete with JSON serialization
- Atomic counters with TTL (rate limiting)
- A decorator caching async results (admin dashboard stats)

Every read/write fails soft: when Redis is unreachable the caller
behaves as on a cache miss.
"""

import json
import logging
from functools import wraps
from typing import Any, Callable

import redis.asyncio as aioredis

from app.config import settings

logger = logging.getLogger(__name__)

KEY_PREFIX = "onlytrack"


class CacheManager:
    """Redis-based cache manager."""

    def __init__(self) -> None:
        self._client: aioredis.Redis | None = None

    async def init(self) -> None:
        """Initialize Redis connection pool."""
        logger.info("Initializing Redis connection...")

        self._client = aioredis.from_url(
            str(settings.redis_url),
            encoding="utf-8",
            decode_responses=True,
            max_connections=20,
        )

        await self._client.ping()
        logger.info("Redis connection initialized")

    async def close(self) -> None:
        """Close Redis connection."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("Redis connection closed")

    @property
    def is_initialized(self) -> bool:
        return self._client is not None

    @property
    def client(self) -> aioredis.Redis:
        """Get Redis client."""
        if not self._client:
            raise RuntimeError("Cache not initialized. Call init() first.")
        return self._client

    def _build_key(self, namespace: str, key: str) -> str:
        """
        Build namespaced cache key.

        Format: onlytrack:{namespace}:{key}
        Example: onlytrack:rl_auth:203.0.113.7:auth
        """
        return f"{KEY_PREFIX}:{namespace}:{key}"

    async def get(self, namespace: str, key: str) -> Any | None:
        """Deserialized value, or None if missing or Redis is unavailable."""
        cache_key = self._build_key(namespace, key)

        try:
            value = await self.client.get(cache_key)
        except Exception as e:
            logger.warning(f"Cache get error: {cache_key} - {e}")
            return None

        if value is None:
            return None
        return json.loads(value)

    async def set(
        self,
        namespace: str,
        key: str,
        value: Any,
        ttl: int | None = None,
    ) -> bool:
        """
        Set value in cache.

        Args:
            namespace: Cache namespace
            key: Cache key
            value: Value to cache (must be JSON-serializable)
            ttl: Time-to-live in seconds (None = use default)
        """
        cache_key = self._build_key(namespace, key)
        ttl = ttl or settings.redis_cache_ttl

        try:
            await self.client.set(cache_key, json.dumps(value, default=str), ex=ttl)
            return True
        except Exception as e:
            logger.warning(f"Cache set error: {cache_key} - {e}")
            return False

    async def delete(self, namespace: str, key: str) -> bool:
        """Delete specific cache entry."""
        cache_key = self._build_key(namespace, key)

        try:
            return await self.client.delete(cache_key) > 0
        except Exception as e:
            logger.warning(f"Cache delete error: {cache_key} - {e}")
            return False

    async def increment(
        self,
        namespace: str,
        key: str,
        ttl: int | None = None,
    ) -> int:
        """
        Increment a counter, creating it if needed.

        The TTL is only set when the counter is created so that the
        window does not slide on every hit.

        Raises:
            RuntimeError / RedisError: callers decide how to degrade
        """
        cache_key = self._build_key(namespace, key)

        pipe = self.client.pipeline()
        pipe.incr(cache_key)
        if ttl:
            pipe.expire(cache_key, ttl, nx=True)
        results = await pipe.execute()
        return results[0]

    async def get_ttl(self, namespace: str, key: str) -> int:
        """Get remaining TTL for a key in seconds."""
        cache_key = self._build_key(namespace, key)

        try:
            return await self.client.ttl(cache_key)
        except Exception as e:
            logger.warning(f"Cache TTL error: {cache_key} - {e}")
            return -1


# Global instance
cache_manager = CacheManager()


def cached(
    namespace: str,
    ttl: int = 300,
    key_builder: Callable | None = None,
):
    """
    Decorator for caching async function results.

    Usage:
        @cached(namespace="admin_stats", ttl=60, key_builder=lambda db: "global")
        async def compute_stats(db: AsyncSession) -> dict:
            ...
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            if key_builder:
                cache_key = key_builder(*args, **kwargs)
            else:
                key_parts = [func.__name__]
                key_parts.extend(str(a) for a in args)
                key_parts.extend(f"{k}={v}" for k, v in sorted(kwargs.items()))
                cache_key = ":".join(key_parts)

            if cache_manager.is_initialized:
                cached_value = await cache_manager.get(namespace, cache_key)
                if cached_value is not None:
                    logger.debug(f"Cache hit: {namespace}:{cache_key}")
                    return cached_value

            result = await func(*args, **kwargs)

            if result is not None and cache_manager.is_initialized:
                await cache_manager.set(namespace, cache_key, result, ttl=ttl)

            return result

        return wrapper
    return decorator
