"""
Response caching middleware.

Per request: ask the cacheability predicate, look the derived key up in the
store, then either replay the stored body or run the downstream app with the
response intercepted so the body can be persisted once it has been sent.
"""

import functools
import inspect
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Union

from starlette.requests import Request
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from shared.logging import get_logger
from shared.metrics import MetricsCollector
from .coordinator import WriteCoordinator
from .interceptor import InterceptedResponse, ResponseInterceptor
from .keys import derive_cache_key
from .store import CacheStore, CacheValue

CachePredicate = Callable[[Request], Union[bool, Awaitable[bool]]]
KeyFunc = Callable[[Request], str]


class CacheDecision(str, Enum):
    """How a request was routed through the cache."""

    PASSTHROUGH = "bypass"
    HIT = "hit"
    MISS = "miss"
    LOOKUP_ERROR = "error"


class _ReplayableReceive:
    """Keeps request messages read by the predicate for the downstream app."""

    def __init__(self, receive: Receive):
        self._receive = receive
        self._consumed: List[Message] = []

    async def record(self) -> Message:
        message = await self._receive()
        self._consumed.append(message)
        return message

    async def replay(self) -> Message:
        if self._consumed:
            return self._consumed.pop(0)
        return await self._receive()


def cache_get_requests(request: Request) -> bool:
    """Default predicate: only GET responses are cached."""
    return request.method == "GET"


class ResponseCacheMiddleware:
    """ASGI middleware caching response bodies in a ``CacheStore``.

    Store failures never reach the client: a failed lookup behaves like a
    miss and a failed write is logged and dropped. Overlapping misses for one
    key all run the app, but only the first claims the write; the others are
    served without buffering.
    """

    def __init__(
        self,
        app: ASGIApp,
        store: CacheStore,
        should_cache: CachePredicate = cache_get_requests,
        coordinator: Optional[WriteCoordinator] = None,
        key_func: KeyFunc = derive_cache_key,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.app = app
        self.store = store
        self.should_cache = should_cache
        self.coordinator = coordinator if coordinator is not None else WriteCoordinator()
        self.key_func = key_func
        self.metrics = metrics
        self.logger = get_logger("response_cache.middleware")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        replay = _ReplayableReceive(receive)
        request = Request(scope, replay.record)
        receive = replay.replay
        if not await self._is_cacheable(request):
            self._record_lookup(CacheDecision.PASSTHROUGH)
            await self.app(scope, receive, send)
            return

        key = self.key_func(request)
        cached = await self._lookup(key)
        if cached is not None:
            await self._serve_cached(send, cached)
            return

        if not self.coordinator.try_acquire(key):
            self._record_write("skipped")
            await self.app(scope, receive, send)
            return

        try:
            interceptor = ResponseInterceptor(send, functools.partial(self._persist, key))
            await self.app(scope, receive, interceptor)
        finally:
            self.coordinator.release(key)

    async def _is_cacheable(self, request: Request) -> bool:
        result = self.should_cache(request)
        if inspect.isawaitable(result):
            result = await result
        return bool(result)

    async def _lookup(self, key: str) -> Optional[CacheValue]:
        """Fetch ``key``; any store error counts as a miss."""
        try:
            value = await self.store.get(key)
        except Exception as e:
            self.logger.warning("Cache lookup failed, invoking handler", key=key, error=str(e))
            self._record_lookup(CacheDecision.LOOKUP_ERROR)
            return None

        if value is None:
            self.logger.debug("Cache miss", key=key)
            self._record_lookup(CacheDecision.MISS)
        else:
            self.logger.debug("Cache hit", key=key)
            self._record_lookup(CacheDecision.HIT)
        return value

    async def _serve_cached(self, send: Send, cached: CacheValue) -> None:
        body = cached.encode("utf-8") if isinstance(cached, str) else bytes(cached)
        await send({
            "type": "http.response.start",
            "status": 200,
            "headers": [
                (b"content-length", str(len(body)).encode("latin-1")),
                (b"x-cache", b"HIT"),
            ],
        })
        await send({"type": "http.response.body", "body": body})

    async def _persist(self, key: str, response: InterceptedResponse) -> None:
        if not response.is_cacheable:
            self.logger.debug(
                "Response not cached",
                key=key,
                status_code=response.status_code
            )
            self._record_write("not_cacheable")
            return

        try:
            await self.store.set(key, response.body)
        except Exception as e:
            self.logger.warning("Cache write failed", key=key, error=str(e))
            self._record_write("failed")
            return

        self._record_write("stored")

    def _record_lookup(self, decision: CacheDecision) -> None:
        if self.metrics:
            self.metrics.record_cache_lookup(decision.value)

    def _record_write(self, outcome: str) -> None:
        if self.metrics:
            self.metrics.record_cache_write(outcome)
