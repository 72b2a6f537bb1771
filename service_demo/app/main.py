"""
Demo service for the response cache.
"""

import asyncio
from pathlib import Path
from typing import AsyncIterator, Dict, Optional

from fastapi import Query, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, StreamingResponse

from shared.base_service import BaseService
from shared.config import CacheSettings
from response_cache import CacheStore, ResponseCacheMiddleware, WriteCoordinator
from response_cache.engines import build_engine
from response_cache.store import StorageEngine

INDEX_PATH = Path(__file__).parent / "index.html"
STREAM_CHUNKS = ("<html><body>", "<p>streamed ", "in ", "chunks</p>", "</body></html>")


def is_cacheable(request: Request) -> bool:
    """Only GET requests under /cached are cached."""
    return request.method == "GET" and request.url.path.startswith("/cached")


class DemoService(BaseService):
    """Slow-content service with the response cache installed."""

    def __init__(
        self,
        settings: Optional[CacheSettings] = None,
        engine: Optional[StorageEngine] = None,
        load_delay: float = 2.0,
    ):
        self._engine = engine
        self.load_delay = load_delay
        super().__init__("demo", settings)

        @self.app.on_event("shutdown")
        async def _shutdown():
            close = getattr(self.store.engine, "close", None)
            if close is not None:
                await close()

        self._setup_demo_routes()
        self.app.state.demo_service = self

    def _setup_service_middleware(self):
        engine = self._engine if self._engine is not None else build_engine(self.config)
        self.store = CacheStore(engine, self.config.namespace, self.config.default_ttl_seconds)
        self.coordinator = WriteCoordinator()
        self.app.add_middleware(
            ResponseCacheMiddleware,
            store=self.store,
            should_cache=is_cacheable,
            coordinator=self.coordinator,
            metrics=self.metrics,
        )

    async def _check_dependencies(self) -> Dict[str, str]:
        try:
            await self.store.keys()
            return {"cache": "ok"}
        except Exception as e:
            self.logger.warning("Cache dependency check failed", error=str(e))
            return {"cache": "error"}

    async def load_content(self, fail: bool = False) -> str:
        """Simulate a slow resource load."""
        await asyncio.sleep(self.load_delay)
        if fail:
            raise IOError("failed to get resource")
        return INDEX_PATH.read_text(encoding="utf-8")

    async def _render(self, fail: bool):
        try:
            content = await self.load_content(fail)
        except IOError as e:
            self.logger.error("Content load failed", error=str(e))
            return PlainTextResponse("500 error!", status_code=500)
        return HTMLResponse(content)

    def _setup_demo_routes(self):
        """Set up demo routes."""

        @self.app.get("/not-cached")
        async def not_cached(error: Optional[str] = Query(default=None)):
            """Always takes at least the load delay."""
            return await self._render(bool(error))

        @self.app.get("/cached")
        async def cached(error: Optional[str] = Query(default=None)):
            """Slow on a miss, instant while the entry is live."""
            return await self._render(bool(error))

        @self.app.get("/cached/stream")
        async def cached_stream():
            """Chunked response; the cache stores the concatenated chunks."""

            async def chunks() -> AsyncIterator[str]:
                for chunk in STREAM_CHUNKS:
                    await asyncio.sleep(self.load_delay / len(STREAM_CHUNKS))
                    yield chunk

            return StreamingResponse(chunks(), media_type="text/html")


def create_app(settings: Optional[CacheSettings] = None):
    """Create FastAPI application."""
    service = DemoService(settings)
    return service.app


if __name__ == "__main__":
    service = DemoService()
    service.run()
