"""FastAPI dependencies for post pages."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import PostPageService


async def get_post_page_service(request: Request) -> PostPageService:
    """Get the post page service from app state.

    Raises:
        HTTPException: 503 when the content store was not configured at startup.
    """
    app_state = request.app.state
    if not getattr(app_state, "post_page_service", None):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Post pages are not available",
        )
    return app_state.post_page_service


PostPageServiceDep = Annotated[PostPageService, Depends(get_post_page_service)]
