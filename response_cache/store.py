"""
Storage engine interface and the namespace-bound cache store.

Engines speak in full keys (``"<namespace>:<key>"``). The ``CacheStore``
binds one engine to a namespace and a default TTL so the middleware only
ever deals with bare cache keys.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Union

from shared.errors import ConfigurationError
from shared.logging import get_logger

NAMESPACE_SEPARATOR = ":"
# Separator plus the glob characters engines use to match whole namespaces
RESERVED_NAMESPACE_CHARS = NAMESPACE_SEPARATOR + "*?[]\\"

CacheValue = Union[bytes, str]


class StorageEngine(ABC):
    """Capability interface every storage backend implements.

    Failures are raised, never returned; a missing key is ``None``.
    """

    name = "engine"

    @abstractmethod
    async def get(self, key: str) -> Optional[CacheValue]:
        """Return the stored value or None."""

    @abstractmethod
    async def set(self, key: str, value: CacheValue, ttl: float) -> None:
        """Store ``value`` for ``ttl`` seconds."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove ``key`` if present."""

    @abstractmethod
    async def keys(self) -> List[str]:
        """List every live full key."""

    @abstractmethod
    async def ttl(self, key: str) -> Optional[float]:
        """Seconds left before ``key`` expires, None when absent."""

    @abstractmethod
    async def flush(self, namespace: Optional[str] = None) -> None:
        """Drop all keys, or only those of ``namespace``."""

    def get_key_without_namespace(self, full_key: str) -> str:
        if NAMESPACE_SEPARATOR not in full_key:
            return full_key
        return full_key.split(NAMESPACE_SEPARATOR, 1)[1]

    def get_namespace_from_key(self, full_key: str) -> str:
        if NAMESPACE_SEPARATOR not in full_key:
            return ""
        return full_key.split(NAMESPACE_SEPARATOR, 1)[0]


class CacheStore:
    """Storage engine bound to a namespace and default TTL."""

    def __init__(self, engine: StorageEngine, namespace: str, default_ttl: float):
        if not namespace or any(char in namespace for char in RESERVED_NAMESPACE_CHARS):
            raise ConfigurationError(
                "Namespace must be non-empty and must not contain any of :*?[]\\",
                {"namespace": namespace}
            )
        if default_ttl <= 0:
            raise ConfigurationError(
                "Default TTL must be positive",
                {"default_ttl": default_ttl}
            )

        self.engine = engine
        self.namespace = namespace
        self.default_ttl = default_ttl
        self.logger = get_logger("response_cache.store")

    def _full_key(self, key: str) -> str:
        return f"{self.namespace}{NAMESPACE_SEPARATOR}{key}"

    async def get(self, key: str) -> Optional[CacheValue]:
        return await self.engine.get(self._full_key(key))

    async def set(self, key: str, value: CacheValue, ttl: Optional[float] = None) -> None:
        cache_ttl = self.default_ttl if ttl is None else ttl
        await self.engine.set(self._full_key(key), value, cache_ttl)
        self.logger.debug("Cached value", key=key, ttl=cache_ttl, size=len(value))

    async def delete(self, key: str) -> None:
        await self.engine.delete(self._full_key(key))

    async def ttl(self, key: str) -> Optional[float]:
        return await self.engine.ttl(self._full_key(key))

    async def keys(self) -> List[str]:
        """Bare keys belonging to this store's namespace."""
        return [
            self.engine.get_key_without_namespace(full_key)
            for full_key in await self.engine.keys()
            if self.engine.get_namespace_from_key(full_key) == self.namespace
        ]

    async def flush(self) -> None:
        await self.engine.flush(self.namespace)
        self.logger.info("Flushed cache namespace", namespace=self.namespace)
