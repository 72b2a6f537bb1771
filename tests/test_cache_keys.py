"""
Unit tests for cache key derivation.
"""

import pytest
from starlette.requests import Request

from response_cache.keys import derive_cache_key


def make_request(method: str = "GET", path: str = "/", query_string: bytes = b"") -> Request:
    """Build a bare Starlette request from an HTTP scope."""
    return Request({
        "type": "http",
        "method": method,
        "path": path,
        "query_string": query_string,
        "headers": [],
    })


class TestDeriveCacheKey:
    """Test cases for derive_cache_key."""

    def test_method_and_path(self):
        assert derive_cache_key(make_request("GET", "/cached")) == "GET:/cached"

    def test_query_string_appended(self):
        request = make_request("GET", "/cached", b"page=2&sort=asc")
        assert derive_cache_key(request) == "GET:/cached?page=2&sort=asc"

    def test_identical_requests_share_key(self):
        first = make_request("GET", "/items", b"a=1")
        second = make_request("GET", "/items", b"a=1")
        assert derive_cache_key(first) == derive_cache_key(second)

    @pytest.mark.parametrize("other", [
        make_request("POST", "/items", b"a=1"),
        make_request("GET", "/Items", b"a=1"),
        make_request("GET", "/items", b"a=2"),
    ])
    def test_different_identity_different_key(self, other):
        assert derive_cache_key(make_request("GET", "/items", b"a=1")) != derive_cache_key(other)

    def test_query_order_is_not_normalized(self):
        """Parameter order is part of the key."""
        first = make_request("GET", "/items", b"a=1&b=2")
        second = make_request("GET", "/items", b"b=2&a=1")
        assert derive_cache_key(first) != derive_cache_key(second)
