"""Post read service.

Resolves posts from the content store:
- slug enumeration for page generation
- a single post by slug, with author and approved comments
"""

import structlog

from src.content.client import ContentStore
from src.content.queries import POST_BY_SLUG_QUERY, POST_PATHS_QUERY

from .models import Post, PostPath


logger = structlog.get_logger(__name__)


class PostService:
    """Service for reading posts."""

    def __init__(self, store: ContentStore) -> None:
        """Initialize with a content store."""
        self.store = store

    async def list_paths(self) -> list[PostPath]:
        """Enumerate every post that has a slug."""
        rows = await self.store.fetch(POST_PATHS_QUERY) or []
        paths = [PostPath.model_validate(row) for row in rows]
        with_slug = [path for path in paths if path.slug and path.slug.current]

        skipped = len(paths) - len(with_slug)
        if skipped:
            logger.warning("posts_without_slug_skipped", count=skipped)

        return with_slug

    async def list_slugs(self) -> list[str]:
        """Enumerate every post slug."""
        return [path.slug.current for path in await self.list_paths() if path.slug]

    async def get_post(self, slug: str) -> Post | None:
        """Get a post by slug.

        Args:
            slug: The post's ``slug.current``.

        Returns:
            The post, or None when no post has this slug.
        """
        row = await self.store.fetch(POST_BY_SLUG_QUERY, {"slug": slug})
        if not row:
            logger.info("post_not_found", slug=slug)
            return None

        post = Post.model_validate(row)

        visible = [c for c in post.comments if c.is_visible_on(post.id)]
        if len(visible) != len(post.comments):
            logger.warning(
                "unapproved_comments_dropped",
                post_id=post.id,
                count=len(post.comments) - len(visible),
            )
        post.comments = visible

        logger.debug(
            "post_loaded", post_id=post.id, slug=slug, comments=len(post.comments)
        )
        return post
