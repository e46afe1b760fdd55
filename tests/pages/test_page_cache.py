"""Tests for the revalidating page cache."""

import asyncio

import pytest

from src.pages.cache import PageCache


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class Renderer:
    """Renderer returning a scripted sequence of pages."""

    def __init__(self, *pages: str | None | Exception) -> None:
        self.pages = list(pages)
        self.calls = 0

    async def __call__(self) -> str | None:
        self.calls += 1
        page = self.pages.pop(0)
        if isinstance(page, Exception):
            raise page
        return page


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(1000.0)


@pytest.fixture
def cache(clock: FakeClock) -> PageCache:
    return PageCache(60, clock=clock)


class TestGetOrRender:
    """Tests for PageCache.get_or_render."""

    @pytest.mark.asyncio
    async def test_miss_renders_while_waiting(self, cache: PageCache):
        renderer = Renderer("v1")

        page = await cache.get_or_render("/post/a", renderer)

        assert page is not None
        assert page.html == "v1"
        assert renderer.calls == 1

    @pytest.mark.asyncio
    async def test_not_found_is_not_cached(self, cache: PageCache):
        renderer = Renderer(None, "v1")

        assert await cache.get_or_render("/post/a", renderer) is None
        page = await cache.get_or_render("/post/a", renderer)

        assert page.html == "v1"
        assert renderer.calls == 2

    @pytest.mark.asyncio
    async def test_fresh_page_is_served_from_cache(self, cache, clock):
        renderer = Renderer("v1", "v2")
        await cache.get_or_render("/post/a", renderer)

        clock.now += 59
        page = await cache.get_or_render("/post/a", renderer)

        assert page.html == "v1"
        assert renderer.calls == 1

    @pytest.mark.asyncio
    async def test_change_inside_window_is_not_visible(self, cache, clock):
        """A page rendered at T does not reflect a change made at T+30."""
        renderer = Renderer("without comment", "with comment")
        await cache.get_or_render("/post/a", renderer)

        clock.now += 30
        page = await cache.get_or_render("/post/a", renderer)

        assert page.html == "without comment"

    @pytest.mark.asyncio
    async def test_stale_page_served_then_regenerated(self, cache, clock):
        """At T+60 the stale page is served once and replaced in the background."""
        renderer = Renderer("v1", "v2")
        await cache.get_or_render("/post/a", renderer)

        clock.now += 60
        stale = await cache.get_or_render("/post/a", renderer)
        await cache.wait_for_regenerations()
        fresh = await cache.get_or_render("/post/a", renderer)

        assert stale.html == "v1"
        assert fresh.html == "v2"
        assert renderer.calls == 2

    @pytest.mark.asyncio
    async def test_one_regeneration_per_path(self, cache, clock):
        gate = asyncio.Event()
        calls = 0

        async def slow_renderer() -> str:
            nonlocal calls
            calls += 1
            await gate.wait()
            return f"v{calls}"

        await cache.render("/post/a", lambda: asyncio.sleep(0, result="v0"))
        clock.now += 120

        await cache.get_or_render("/post/a", slow_renderer)
        await cache.get_or_render("/post/a", slow_renderer)
        await asyncio.sleep(0)
        gate.set()
        await cache.wait_for_regenerations()

        assert calls == 1

    @pytest.mark.asyncio
    async def test_failed_regeneration_keeps_stale_page(self, cache, clock):
        renderer = Renderer("v1", RuntimeError("store down"))
        await cache.get_or_render("/post/a", renderer)

        clock.now += 61
        await cache.get_or_render("/post/a", renderer)
        await cache.wait_for_regenerations()

        page = await cache.get("/post/a")
        assert page.html == "v1"

    @pytest.mark.asyncio
    async def test_regeneration_evicts_deleted_post(self, cache, clock):
        renderer = Renderer("v1", None)
        await cache.get_or_render("/post/a", renderer)

        clock.now += 61
        await cache.get_or_render("/post/a", renderer)
        await cache.wait_for_regenerations()

        assert await cache.get("/post/a") is None

    @pytest.mark.asyncio
    async def test_clear(self, cache):
        await cache.get_or_render("/post/a", Renderer("v1"))

        await cache.clear()

        assert await cache.get("/post/a") is None


class FakeRedis:
    """Dict-backed stand-in for the async Redis client."""

    def __init__(self) -> None:
        self.data: dict[str, bytes] = {}

    async def get(self, key: str) -> bytes | None:
        return self.data.get(key)

    async def set(self, key: str, value: bytes) -> None:
        self.data[key] = value

    async def delete(self, key: str) -> None:
        self.data.pop(key, None)

    async def scan_iter(self, match: str):
        prefix = match.rstrip("*")
        for key in list(self.data):
            if key.startswith(prefix):
                yield key


class TestRedisBackend:
    """Pages are shared through Redis when a client is given."""

    @pytest.mark.asyncio
    async def test_pages_round_trip_through_redis(self, clock):
        redis = FakeRedis()
        cache = PageCache(60, redis=redis, key_prefix="test:pages:", clock=clock)

        await cache.get_or_render("/post/a", Renderer("v1"))

        assert list(redis.data) == ["test:pages:/post/a"]
        other_worker = PageCache(60, redis=redis, key_prefix="test:pages:", clock=clock)
        page = await other_worker.get("/post/a")
        assert page.html == "v1"
        assert page.generated_at == clock.now
        assert cache.backend == "redis"

    @pytest.mark.asyncio
    async def test_clear_removes_prefixed_keys_only(self, clock):
        redis = FakeRedis()
        redis.data["unrelated"] = b"x"
        cache = PageCache(60, redis=redis, key_prefix="test:pages:", clock=clock)
        await cache.get_or_render("/post/a", Renderer("v1"))

        await cache.clear()

        assert list(redis.data) == ["unrelated"]
