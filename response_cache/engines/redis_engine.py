"""
Redis storage engine.
"""

from typing import List, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from shared.errors import StorageEngineError
from shared.logging import get_logger
from ..store import CacheValue, StorageEngine


def _escape_glob(value: str) -> str:
    """Escape Redis MATCH metacharacters so ``value`` matches literally."""
    return "".join("\\" + char if char in "*?[]\\" else char for char in value)


class RedisEngine(StorageEngine):
    """Engine backed by a Redis server through ``redis.asyncio``."""

    name = "redis"

    def __init__(self, redis_url: str, client: Optional[redis.Redis] = None):
        self.redis_url = redis_url
        self.logger = get_logger("response_cache.engines.redis")
        self._redis: Optional[redis.Redis] = client

    async def _get_redis(self) -> redis.Redis:
        """Get Redis connection."""
        if self._redis is None:
            self._redis = redis.from_url(
                self.redis_url,
                socket_connect_timeout=5,
                socket_timeout=5,
                health_check_interval=30
            )
        return self._redis

    async def get(self, key: str) -> Optional[CacheValue]:
        try:
            redis_client = await self._get_redis()
            return await redis_client.get(key)
        except RedisError as e:
            raise StorageEngineError(self.name, f"GET failed: {e}", {"key": key}) from e

    async def set(self, key: str, value: CacheValue, ttl: float) -> None:
        try:
            redis_client = await self._get_redis()
            await redis_client.set(key, value, px=max(1, int(ttl * 1000)))
        except RedisError as e:
            raise StorageEngineError(self.name, f"SET failed: {e}", {"key": key}) from e

    async def delete(self, key: str) -> None:
        try:
            redis_client = await self._get_redis()
            await redis_client.delete(key)
        except RedisError as e:
            raise StorageEngineError(self.name, f"DEL failed: {e}", {"key": key}) from e

    async def keys(self) -> List[str]:
        return await self._scan("*")

    async def _scan(self, pattern: str) -> List[str]:
        try:
            redis_client = await self._get_redis()
            found = []
            async for key in redis_client.scan_iter(match=pattern):
                found.append(key.decode("utf-8") if isinstance(key, bytes) else key)
            return found
        except RedisError as e:
            raise StorageEngineError(self.name, f"SCAN failed: {e}", {"pattern": pattern}) from e

    async def ttl(self, key: str) -> Optional[float]:
        try:
            redis_client = await self._get_redis()
            remaining_ms = await redis_client.pttl(key)
        except RedisError as e:
            raise StorageEngineError(self.name, f"PTTL failed: {e}", {"key": key}) from e

        # -2: no such key, -1: key without expiry
        if remaining_ms == -2:
            return None
        if remaining_ms == -1:
            return float("inf")
        return remaining_ms / 1000.0

    async def flush(self, namespace: Optional[str] = None) -> None:
        if namespace is None:
            try:
                redis_client = await self._get_redis()
                await redis_client.flushdb()
            except RedisError as e:
                raise StorageEngineError(self.name, f"FLUSHDB failed: {e}") from e
            return

        keys = await self._scan(f"{_escape_glob(namespace)}:*")
        if not keys:
            return
        try:
            redis_client = await self._get_redis()
            await redis_client.delete(*keys)
            self.logger.info("Cleared cache namespace", namespace=namespace, keys_count=len(keys))
        except RedisError as e:
            raise StorageEngineError(self.name, f"DEL failed: {e}", {"namespace": namespace}) from e

    async def close(self) -> None:
        """Close the Redis connection."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
