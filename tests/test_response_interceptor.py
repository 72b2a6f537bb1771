"""
Unit tests for the response interceptor.
"""

import pytest
from unittest.mock import AsyncMock

from response_cache.interceptor import InterceptedResponse, ResponseInterceptor
from shared.errors import InterceptorStateError

START_200 = {"type": "http.response.start", "status": 200, "headers": [(b"content-type", b"text/plain")]}


class TestResponseInterceptor:
    """Test cases for ResponseInterceptor."""

    @pytest.fixture
    def send(self):
        """Real sink stub."""
        return AsyncMock()

    @pytest.fixture
    def on_complete(self):
        """Completion callback stub."""
        return AsyncMock()

    @pytest.fixture
    def interceptor(self, send, on_complete):
        """Create ResponseInterceptor around the stubs."""
        return ResponseInterceptor(send, on_complete)

    @pytest.mark.asyncio
    async def test_forwards_messages_unchanged_and_in_order(self, interceptor, send):
        messages = [
            START_200,
            {"type": "http.response.body", "body": b"o", "more_body": True},
            {"type": "http.response.body", "body": b"k", "more_body": True},
            {"type": "http.response.body", "body": b"", "more_body": False},
        ]

        for message in messages:
            await interceptor(message)

        assert [call.args[0] for call in send.call_args_list] == messages

    @pytest.mark.asyncio
    async def test_completion_carries_full_body(self, interceptor, on_complete):
        await interceptor(START_200)
        await interceptor.write(b"o")
        await interceptor.write(b"k")
        await interceptor.end()

        on_complete.assert_awaited_once_with(InterceptedResponse(status_code=200, body=b"ok"))

    @pytest.mark.asyncio
    async def test_end_with_final_chunk(self, interceptor, send, on_complete):
        await interceptor(START_200)
        await interceptor.write(b"hello ")
        await interceptor.end(b"world")

        assert send.call_args_list[-1].args[0] == {
            "type": "http.response.body", "body": b"world", "more_body": False
        }
        assert on_complete.await_args.args[0].body == b"hello world"

    @pytest.mark.asyncio
    async def test_single_body_message(self, interceptor, on_complete):
        await interceptor(START_200)
        await interceptor({"type": "http.response.body", "body": b"whole"})

        result = on_complete.await_args.args[0]
        assert result.body == b"whole"
        assert result.is_cacheable
        assert interceptor.completed

    @pytest.mark.asyncio
    async def test_no_completion_before_end(self, interceptor, on_complete):
        await interceptor(START_200)
        await interceptor.write(b"partial")

        on_complete.assert_not_awaited()
        assert interceptor.buffered == b"partial"
        assert not interceptor.completed

    @pytest.mark.asyncio
    async def test_error_status_marks_failure(self, interceptor, on_complete):
        await interceptor({"type": "http.response.start", "status": 500, "headers": []})
        await interceptor.end(b"500 error")

        result = on_complete.await_args.args[0]
        assert result.status_code == 500
        assert result.is_cacheable is False

    @pytest.mark.asyncio
    async def test_write_after_end_rejected(self, interceptor, send):
        await interceptor(START_200)
        await interceptor.end(b"done")

        with pytest.raises(InterceptorStateError):
            await interceptor.write(b"late")
        assert send.await_count == 2

    @pytest.mark.asyncio
    async def test_other_messages_pass_through(self, interceptor, send, on_complete):
        trailers = {"type": "http.response.trailers", "headers": [], "more_trailers": False}

        await interceptor(trailers)

        send.assert_awaited_once_with(trailers)
        on_complete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_client_disconnect_does_not_complete(self, send, on_complete):
        """A failed forward propagates and the partial body is never reported."""
        send.side_effect = [None, None, OSError("client went away")]
        interceptor = ResponseInterceptor(send, on_complete)

        await interceptor(START_200)
        await interceptor.write(b"o")
        with pytest.raises(OSError):
            await interceptor.end(b"k")

        on_complete.assert_not_awaited()
        assert interceptor.buffered == b"o"


class TestInterceptedResponse:
    """Test cases for InterceptedResponse cacheability."""

    @pytest.mark.parametrize("status_code,expected", [
        (200, True),
        (204, False),
        (206, False),
        (301, False),
        (404, False),
        (500, False),
        (None, False),
    ])
    def test_is_cacheable(self, status_code, expected):
        assert InterceptedResponse(status_code=status_code, body=b"").is_cacheable is expected
