"""FastAPI dependencies for the comment system.

Provides dependency injection for:
- Comment service
- Client IP of the current request
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from src.core.middleware import get_client_ip

from .service import CommentService


async def get_comment_service(request: Request) -> CommentService:
    """Get comment service from app state.

    Args:
        request: FastAPI request

    Returns:
        CommentService instance
    """
    app_state = request.app.state
    if not getattr(app_state, "comment_service", None):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Comment service not available",
        )
    return app_state.comment_service


def get_request_client_ip(request: Request) -> str:
    """Client IP resolved by the request middleware, or from headers."""
    return getattr(request.state, "client_ip", None) or get_client_ip(request)


# Type aliases for dependency injection
CommentServiceDep = Annotated[CommentService, Depends(get_comment_service)]
ClientIp = Annotated[str, Depends(get_request_client_ip)]
