"""
Process-memory storage engine.
"""

import time
from typing import Dict, List, Optional, Tuple

from ..store import CacheValue, StorageEngine


class MemoryEngine(StorageEngine):
    """Dict-backed engine; expired entries are dropped lazily on access."""

    name = "memory"

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._entries: Dict[str, Tuple[CacheValue, float]] = {}

    def _live(self, key: str) -> Optional[Tuple[CacheValue, float]]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry[1]:
            del self._entries[key]
            return None
        return entry

    async def get(self, key: str) -> Optional[CacheValue]:
        entry = self._live(key)
        return entry[0] if entry else None

    async def set(self, key: str, value: CacheValue, ttl: float) -> None:
        self._entries[key] = (value, self._clock() + ttl)

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def keys(self) -> List[str]:
        return [key for key in list(self._entries) if self._live(key)]

    async def ttl(self, key: str) -> Optional[float]:
        entry = self._live(key)
        if entry is None:
            return None
        return max(0.0, entry[1] - self._clock())

    async def flush(self, namespace: Optional[str] = None) -> None:
        if namespace is None:
            self._entries.clear()
            return
        for key in list(self._entries):
            if self.get_namespace_from_key(key) == namespace:
                del self._entries[key]
