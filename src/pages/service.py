"""Post page generation.

Ties together the post service, the body renderer, the templates and the
page cache:
- enumerate renderable paths
- render a post page (or report that the post does not exist)
- serve pages through the revalidating cache
- pre-render every known page at startup
"""

import structlog

from src.content.images import ImageUrlBuilder
from src.core.context import set_page_path
from src.posts.models import Post
from src.posts.service import PostService

from .cache import CachedPage, PageCache
from .portable_text import PortableTextRenderer, post_body_renderer
from .templates import render_document, render_not_found_content, render_post_content


logger = structlog.get_logger(__name__)

POST_PATH_PREFIX = "/post/"
COMMENT_ACTION = "/api/createComment"


def post_path(slug: str) -> str:
    """Page path for a post slug."""
    return f"{POST_PATH_PREFIX}{slug}"


class PostPageService:
    """Service that renders and caches post pages."""

    def __init__(
        self,
        post_service: PostService,
        cache: PageCache,
        *,
        site_title: str = "Inkwell",
        image_builder: ImageUrlBuilder | None = None,
        body_renderer: PortableTextRenderer | None = None,
    ) -> None:
        self.post_service = post_service
        self.cache = cache
        self.site_title = site_title
        self.image_builder = image_builder
        self.body_renderer = body_renderer or post_body_renderer(image_builder)

    async def paths(self) -> list[str]:
        """Every page path that can be pre-rendered."""
        return [post_path(slug) for slug in await self.post_service.list_slugs()]

    def render_post(self, post: Post) -> str:
        """Render the full HTML document for a post."""
        content = render_post_content(
            post,
            self.body_renderer.render(post.body),
            image_builder=self.image_builder,
            comment_action=COMMENT_ACTION,
        )
        return render_document(
            self.site_title,
            title=post.title,
            description=post.description or "",
            content=content,
        )

    def render_not_found(self) -> str:
        return render_document(
            self.site_title,
            title="404: This page could not be found",
            content=render_not_found_content(),
        )

    async def render_slug(self, slug: str) -> str | None:
        """Fetch and render a post, or None when the slug is unknown."""
        post = await self.post_service.get_post(slug)
        if post is None:
            return None
        return self.render_post(post)

    async def get_page(self, slug: str) -> CachedPage | None:
        """Serve the page for a slug through the cache.

        Unknown slugs are looked up on demand rather than rejected, so posts
        published after startup render on their first request.
        """
        path = post_path(slug)
        set_page_path(path)
        return await self.cache.get_or_render(path, lambda: self.render_slug(slug))

    async def prerender(self) -> int:
        """Render every known post page into the cache.

        Returns:
            Number of pages rendered.
        """
        rendered = 0
        for slug in await self.post_service.list_slugs():
            path = post_path(slug)
            page = await self.cache.render(path, lambda slug=slug: self.render_slug(slug))
            if page is not None:
                rendered += 1

        logger.info("pages_prerendered", count=rendered)
        return rendered
