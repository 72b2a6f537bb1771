"""
Response stream interception.

``ResponseInterceptor`` stands in for the ASGI ``send`` callable handed to
the downstream app. Every message goes to the real ``send`` unchanged and in
order; body chunks are additionally copied into a per-request buffer. When
the final chunk has been delivered the whole body is handed to the
``on_complete`` callback.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

from starlette.types import Message, Send

from shared.errors import InterceptorStateError


@dataclass(frozen=True)
class InterceptedResponse:
    """Outcome of one intercepted response."""

    status_code: Optional[int]
    body: bytes

    @property
    def is_cacheable(self) -> bool:
        """Only a complete 200 body can be replayed as a hit."""
        return self.status_code == 200


CompletionCallback = Callable[[InterceptedResponse], Awaitable[None]]


class ResponseInterceptor:
    """Wrap-and-delegate observer around an ASGI ``send``."""

    def __init__(self, send: Send, on_complete: CompletionCallback):
        self._send = send
        self._on_complete = on_complete
        self._buffer: List[bytes] = []
        self.status_code: Optional[int] = None
        self.completed = False

    async def __call__(self, message: Message) -> None:
        message_type = message["type"]

        if message_type == "http.response.start":
            self.status_code = message["status"]
            await self._send(message)
        elif message_type == "http.response.body":
            if self.completed:
                raise InterceptorStateError(
                    "Response body written after end",
                    {"status_code": self.status_code}
                )
            # Forward first: a chunk the client never got is never buffered.
            await self._send(message)
            self._buffer.append(message.get("body", b""))
            if not message.get("more_body", False):
                await self._finish()
        else:
            await self._send(message)

    async def write(self, chunk: bytes) -> None:
        """Send one body chunk, keeping the response open."""
        await self({"type": "http.response.body", "body": chunk, "more_body": True})

    async def end(self, chunk: bytes = b"") -> None:
        """Send the final body chunk and close the response."""
        await self({"type": "http.response.body", "body": chunk, "more_body": False})

    @property
    def buffered(self) -> bytes:
        return b"".join(self._buffer)

    async def _finish(self) -> None:
        self.completed = True
        result = InterceptedResponse(status_code=self.status_code, body=self.buffered)
        self._buffer.clear()
        await self._on_complete(result)
