"""FastAPI dependencies for IP ban management."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import BanService


async def get_ban_service(request: Request) -> BanService:
    """Get ban service from app state."""
    service = getattr(request.app.state, "ban_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Moderation service not available",
        )
    return service


BanServiceDep = Annotated[BanService, Depends(get_ban_service)]
