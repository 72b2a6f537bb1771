"""
Cache key derivation.
"""

from starlette.requests import Request


def derive_cache_key(request: Request) -> str:
    """Build the cache key for a request from method, path and raw query.

    Case and query parameter order are kept as received, so ``?a=1&b=2`` and
    ``?b=2&a=1`` map to different keys.
    """
    key = f"{request.method}:{request.url.path}"
    query = request.scope.get("query_string", b"")
    if query:
        key = f"{key}?{query.decode('latin-1')}"
    return key
