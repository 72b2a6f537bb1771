"""
HTTP response cache for ASGI applications.

Modules:
- keys: cache key derivation from request identity
- interceptor: observer around the ASGI send callable that buffers the body
- coordinator: single-flight bookkeeping for store writes
- middleware: the per-request caching decision pipeline
- store: storage engine interface and namespace/TTL-bound store
- engines: memory and Redis engines
"""

from .coordinator import WriteCoordinator
from .interceptor import InterceptedResponse, ResponseInterceptor
from .keys import derive_cache_key
from .middleware import CacheDecision, ResponseCacheMiddleware, cache_get_requests
from .store import CacheStore, StorageEngine

__all__ = [
    "CacheDecision",
    "CacheStore",
    "InterceptedResponse",
    "ResponseCacheMiddleware",
    "ResponseInterceptor",
    "StorageEngine",
    "WriteCoordinator",
    "cache_get_requests",
    "derive_cache_key",
]
