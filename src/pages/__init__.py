"""Server-rendered post pages.

Note: Router is not exported here to avoid circular imports.
Import directly from src.pages.router when needed.
"""

from .cache import CachedPage, PageCache
from .portable_text import PortableTextRenderer, post_body_renderer
from .service import PostPageService, post_path


__all__ = [
    "CachedPage",
    "PageCache",
    "PortableTextRenderer",
    "PostPageService",
    "post_body_renderer",
    "post_path",
]
