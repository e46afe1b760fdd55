"""Rendered page cache with time-based revalidation.

Pages are served from the cache; once a page is older than the
revalidation interval the stale copy is still served while one background
regeneration per page refreshes it. A page that is not cached yet is
rendered while the request waits.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING

import orjson
import structlog

from src.core.context import set_page_path


if TYPE_CHECKING:
    from redis.asyncio import Redis


logger = structlog.get_logger(__name__)


@dataclass
class CachedPage:
    """A rendered page and when it was generated (epoch seconds)."""

    html: str
    generated_at: float

    def age(self, now: float) -> float:
        return now - self.generated_at


# Returns the fresh page, or None when the page no longer exists.
PageRenderer = Callable[[], Awaitable[str | None]]


class PageCache:
    """Stale-while-revalidate cache for rendered pages.

    Backed by a process-local dict, or by Redis when a client is given so
    that several workers share pages.
    """

    def __init__(
        self,
        revalidate_seconds: float,
        *,
        redis: "Redis | None" = None,
        key_prefix: str = "pages:",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.revalidate_seconds = revalidate_seconds
        self.redis = redis
        self.key_prefix = key_prefix
        self.clock = clock
        self._pages: dict[str, CachedPage] = {}
        self._regenerating: dict[str, asyncio.Task[None]] = {}

    @property
    def backend(self) -> str:
        return "redis" if self.redis is not None else "memory"

    # --------------------------------------------------------------------------
    # Storage
    # --------------------------------------------------------------------------

    async def get(self, path: str) -> CachedPage | None:
        """Get a cached page regardless of its age."""
        if self.redis is None:
            return self._pages.get(path)

        raw = await self.redis.get(self.key_prefix + path)
        if raw is None:
            return None
        return CachedPage(**orjson.loads(raw))

    async def set(self, path: str, page: CachedPage) -> None:
        if self.redis is None:
            self._pages[path] = page
            return
        await self.redis.set(self.key_prefix + path, orjson.dumps(asdict(page)))

    async def delete(self, path: str) -> None:
        if self.redis is None:
            self._pages.pop(path, None)
            return
        await self.redis.delete(self.key_prefix + path)

    def is_stale(self, page: CachedPage) -> bool:
        """Whether the page is due for regeneration."""
        return page.age(self.clock()) >= self.revalidate_seconds

    # --------------------------------------------------------------------------
    # Rendering
    # --------------------------------------------------------------------------

    async def render(self, path: str, renderer: PageRenderer) -> CachedPage | None:
        """Render a page now and store it (or evict it when it is gone)."""
        html = await renderer()
        if html is None:
            await self.delete(path)
            return None

        page = CachedPage(html=html, generated_at=self.clock())
        await self.set(path, page)
        logger.info("page_generated", path=path, backend=self.backend)
        return page

    async def get_or_render(
        self, path: str, renderer: PageRenderer
    ) -> CachedPage | None:
        """Serve a page, rendering or scheduling regeneration as needed.

        Args:
            path: Page path, used as the cache key.
            renderer: Coroutine factory producing the page HTML.

        Returns:
            The page to serve, or None when the page does not exist.
        """
        cached = await self.get(path)
        if cached is None:
            logger.debug("page_cache_miss", path=path)
            return await self.render(path, renderer)

        if self.is_stale(cached):
            self.schedule_regeneration(path, renderer)
        return cached

    def schedule_regeneration(self, path: str, renderer: PageRenderer) -> None:
        """Start a background regeneration unless one is already running."""
        if path in self._regenerating:
            return
        task = asyncio.create_task(self._regenerate(path, renderer))
        self._regenerating[path] = task
        logger.debug("page_regeneration_scheduled", path=path)

    async def _regenerate(self, path: str, renderer: PageRenderer) -> None:
        set_page_path(path)
        try:
            page = await self.render(path, renderer)
            if page is None:
                logger.info("page_evicted", path=path)
        except Exception as e:
            # Keep serving the stale page until a later regeneration succeeds
            logger.exception(
                "page_regeneration_failed",
                path=path,
                error=str(e),
                error_type=type(e).__name__,
            )
        finally:
            self._regenerating.pop(path, None)

    async def wait_for_regenerations(self) -> None:
        """Wait for all running background regenerations to finish."""
        while self._regenerating:
            await asyncio.gather(*self._regenerating.values())

    async def clear(self) -> None:
        """Drop every cached page."""
        if self.redis is None:
            self._pages.clear()
            return
        async for key in self.redis.scan_iter(match=f"{self.key_prefix}*"):
            await self.redis.delete(key)
