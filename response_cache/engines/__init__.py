"""
Reference storage engines.

- memory: process memory, lost on restart
- redis: shared Redis server via redis.asyncio
"""

from shared.config import CacheSettings
from shared.errors import ConfigurationError
from ..store import StorageEngine
from .memory import MemoryEngine
from .redis_engine import RedisEngine


def build_engine(settings: CacheSettings) -> StorageEngine:
    """Create the storage engine named in settings."""
    if settings.engine == "memory":
        return MemoryEngine()
    if settings.engine == "redis":
        return RedisEngine(settings.redis_url)
    raise ConfigurationError("Unknown storage engine", {"engine": settings.engine})


__all__ = ["MemoryEngine", "RedisEngine", "build_engine"]
