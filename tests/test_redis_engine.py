"""
Unit tests for the Redis storage engine.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock
from redis.exceptions import ConnectionError as RedisConnectionError

from response_cache.engines.redis_engine import RedisEngine
from shared.errors import StorageEngineError


async def _aiter(items):
    for item in items:
        yield item


class TestRedisEngine:
    """Test cases for RedisEngine."""

    @pytest.fixture
    def redis_client(self):
        """Mock redis.asyncio client."""
        return AsyncMock()

    @pytest.fixture
    def engine(self, redis_client):
        """Create RedisEngine with the mocked client."""
        return RedisEngine("redis://localhost:6379/0", client=redis_client)

    @pytest.mark.asyncio
    async def test_get(self, engine, redis_client):
        redis_client.get.return_value = b"ok"

        assert await engine.get("express:GET:/") == b"ok"
        redis_client.get.assert_awaited_once_with("express:GET:/")

    @pytest.mark.asyncio
    async def test_set_uses_millisecond_expiry(self, engine, redis_client):
        await engine.set("express:GET:/", b"ok", 15)
        redis_client.set.assert_awaited_once_with("express:GET:/", b"ok", px=15000)

    @pytest.mark.asyncio
    async def test_get_error_wrapped(self, engine, redis_client):
        redis_client.get.side_effect = RedisConnectionError("connection refused")

        with pytest.raises(StorageEngineError) as exc_info:
            await engine.get("express:GET:/")
        assert exc_info.value.code == "STORAGE_ENGINE_ERROR"
        assert exc_info.value.details == {"key": "express:GET:/"}

    @pytest.mark.asyncio
    async def test_set_error_wrapped(self, engine, redis_client):
        redis_client.set.side_effect = RedisConnectionError("connection refused")

        with pytest.raises(StorageEngineError):
            await engine.set("express:GET:/", b"ok", 15)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("pttl,expected", [
        (-2, None),
        (-1, float("inf")),
        (1500, 1.5),
    ])
    async def test_ttl(self, engine, redis_client, pttl, expected):
        redis_client.pttl.return_value = pttl
        assert await engine.ttl("express:GET:/") == expected

    @pytest.mark.asyncio
    async def test_keys_decoded(self, engine, redis_client):
        redis_client.scan_iter = MagicMock(return_value=_aiter([b"express:GET:/a", "express:GET:/b"]))

        assert await engine.keys() == ["express:GET:/a", "express:GET:/b"]

    @pytest.mark.asyncio
    async def test_flush_namespace_deletes_matching_keys(self, engine, redis_client):
        redis_client.scan_iter = MagicMock(return_value=_aiter([b"express:GET:/a"]))

        await engine.flush("express")

        redis_client.scan_iter.assert_called_once_with(match="express:*")
        redis_client.delete.assert_awaited_once_with("express:GET:/a")
        redis_client.flushdb.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_flush_namespace_escapes_glob_characters(self, engine, redis_client):
        redis_client.scan_iter = MagicMock(return_value=_aiter([]))

        await engine.flush("n[12]*")

        redis_client.scan_iter.assert_called_once_with(match=r"n\[12\]\*:*")
        redis_client.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_flush_all(self, engine, redis_client):
        await engine.flush()
        redis_client.flushdb.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close(self, engine, redis_client):
        await engine.close()
        redis_client.aclose.assert_awaited_once()
