"""Health check endpoints."""

from fastapi import APIRouter, Request

from src.config import get_settings


router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live")
async def liveness() -> dict[str, str]:
    """Liveness probe - checks if the application is running."""
    return {"status": "alive"}


@router.get("/ready")
async def readiness(request: Request) -> dict[str, str | bool]:
    """Readiness probe - reports whether the content store is wired up."""
    settings = get_settings()
    content_store_ready = getattr(request.app.state, "content_store", None) is not None
    return {
        "status": "ready" if content_store_ready else "degraded",
        "environment": settings.environment,
        "debug": settings.debug,
        "content_store": content_store_ready,
        "comments_writable": settings.content_store_writable,
    }


@router.get("")
async def health() -> dict[str, str]:
    """General health check endpoint."""
    settings = get_settings()
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }
