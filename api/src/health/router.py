"""Health check endpoints."""

from fastapi import APIRouter, status
from fastapi.responses import ORJSONResponse

from src.config import get_settings
from src.storage import COMMENTS_PREFIX, BlobStoreDep, StorageError


router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live")
async def liveness() -> dict[str, str]:
    """Liveness probe - checks if the application is running."""
    return {"status": "alive"}


@router.get("/ready", response_model=None)
async def readiness(store: BlobStoreDep) -> dict[str, str | bool] | ORJSONResponse:
    """Readiness probe - checks the blob store answers."""
    settings = get_settings()
    try:
        await store.list_keys(COMMENTS_PREFIX)
    except StorageError:
        return ORJSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable", "storage": store.backend_name},
        )
    return {
        "status": "ready",
        "environment": settings.environment,
        "storage": store.backend_name,
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
