"""Inkwell Blog - application factory and service wiring."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from redis.exceptions import RedisError

from src.comments.router import router as comments_router
from src.comments.service import CommentService
from src.config import Settings, get_settings
from src.content.client import ContentStore, ContentStoreError, SanityClient
from src.content.images import ImageUrlBuilder
from src.core.errors import register_exception_handlers
from src.core.logging import configure_structlog, get_logger
from src.core.middleware import RequestContextMiddleware
from src.core.redis import close_page_cache_redis, connect_page_cache_redis
from src.health import router as health_router
from src.pages.cache import PageCache
from src.pages.router import router as pages_router
from src.pages.service import PostPageService
from src.posts.service import PostService


if TYPE_CHECKING:
    from redis.asyncio import Redis


# Logging must be configured before any module-level logger is used
settings = get_settings()
configure_structlog(settings, log_dir=Path(settings.log_dir))

logger = get_logger(__name__)


def init_services(
    app: FastAPI,
    store: ContentStore,
    settings: Settings,
    redis: "Redis | None" = None,
) -> None:
    """Build the services around a content store and expose them on app.state."""
    image_builder = None
    if settings.sanity_project_id:
        image_builder = ImageUrlBuilder(
            settings.sanity_project_id, settings.sanity_dataset
        )

    post_service = PostService(store)
    page_cache = PageCache(
        settings.page_revalidate_seconds,
        redis=redis,
        key_prefix=settings.page_cache_key_prefix,
    )

    app.state.content_store = store
    app.state.post_service = post_service
    app.state.comment_service = CommentService(store)
    app.state.page_cache = page_cache
    app.state.post_page_service = PostPageService(
        post_service,
        page_cache,
        site_title=settings.site_title,
        image_builder=image_builder,
    )


async def open_page_cache_redis(settings: Settings) -> "Redis | None":
    """Redis client for the page cache, or None to keep pages in memory."""
    if settings.page_cache_backend != "redis":
        return None
    try:
        return await connect_page_cache_redis(settings)
    except RedisError as e:
        logger.warning(
            "redis_unavailable",
            error=str(e),
            message="Falling back to the in-memory page cache",
        )
        return None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings = get_settings()
    logger.info(
        "starting_application",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    redis_client = await open_page_cache_redis(settings)

    client: SanityClient | None = None
    try:
        client = SanityClient.from_settings(settings)
    except ContentStoreError as e:
        logger.warning(
            "content_store_not_configured",
            error=e.message,
            message="Post pages and comments are disabled",
        )
    else:
        init_services(app, client, settings, redis=redis_client)
        logger.info(
            "content_store_ready",
            project_id=settings.sanity_project_id,
            dataset=settings.sanity_dataset,
            use_cdn=settings.sanity_use_cdn,
            writable=settings.content_store_writable,
        )

        if settings.pages_prerender_on_startup:
            try:
                await app.state.post_page_service.prerender()
            except ContentStoreError as e:
                logger.warning("pages_prerender_failed", error=e.message)

    yield

    logger.info("shutting_down_application")
    if client is not None:
        await app.state.page_cache.wait_for_regenerations()
        await client.aclose()
    await close_page_cache_redis(redis_client)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Blog pages and comment submission over a headless content store",
        debug=False,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
    )

    # Added last so it wraps CORS and sees every request
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        max_age=settings.cors_max_age,
    )
    app.add_middleware(
        RequestContextMiddleware,
        log_requests=settings.log_requests,
        exclude_paths=settings.log_exclude_paths,
    )

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(pages_router)
    app.include_router(comments_router)

    @app.get("/", include_in_schema=False)
    async def root(request: Request) -> dict[str, str]:
        return {
            "message": "Inkwell Blog",
            "version": settings.app_version,
            "docs": f"{request.url}docs",
        }

    return app


app = create_app()
