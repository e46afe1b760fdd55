"""Post page routes (server-rendered HTML)."""

import structlog
from fastapi import APIRouter, status
from fastapi.responses import HTMLResponse

from .dependencies import PostPageServiceDep


logger = structlog.get_logger(__name__)


router = APIRouter(tags=["pages"])


@router.get(
    "/post/{slug}",
    response_class=HTMLResponse,
    summary="Render a post page",
)
async def post_page(slug: str, page_service: PostPageServiceDep) -> HTMLResponse:
    """Render a post with its approved comments and the comment form.

    Served from the page cache; stale pages are regenerated in the
    background. Unknown slugs return the 404 page.
    """
    page = await page_service.get_page(slug)
    if page is None:
        return HTMLResponse(
            content=page_service.render_not_found(),
            status_code=status.HTTP_404_NOT_FOUND,
        )

    revalidate = int(page_service.cache.revalidate_seconds)
    return HTMLResponse(
        content=page.html,
        headers={
            "Cache-Control": f"s-maxage={revalidate}, stale-while-revalidate",
        },
    )
