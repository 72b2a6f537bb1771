"""
Single-flight coordination of cache writes.
"""

from typing import Set

from shared.logging import get_logger


class WriteCoordinator:
    """Tracks which cache keys have a store write in flight.

    Overlapping cache misses for one key each run the handler, but only the
    one holding the key persists its body. Every successful ``try_acquire``
    must be paired with exactly one ``release``, or the key never gets
    written again.
    """

    def __init__(self):
        self._pending: Set[str] = set()
        self.logger = get_logger("response_cache.coordinator")

    def try_acquire(self, key: str) -> bool:
        """Claim the write for ``key``; False if another request holds it."""
        # No await between check and insert: atomic on the event loop.
        if key in self._pending:
            self.logger.debug("Cache write already in flight", key=key)
            return False
        self._pending.add(key)
        return True

    def release(self, key: str) -> None:
        self._pending.discard(key)

    def is_pending(self, key: str) -> bool:
        return key in self._pending

    def __len__(self) -> int:
        return len(self._pending)
