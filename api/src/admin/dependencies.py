"""FastAPI dependencies for admin authentication.

Provides dependency injection for:
- Bearer token extraction
- Admin auth service
- Admin session enforcement
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from src.core.context import mark_admin
from src.core.errors import AppError, handle_app_error

from .service import AdminAuthService


def get_token_from_header(request: Request) -> str | None:
    """Extract Bearer token from Authorization header.

    Args:
        request: FastAPI request

    Returns:
        Token string or None if not present
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None

    expected_parts = 2
    parts = auth_header.split()
    if len(parts) != expected_parts or parts[0].lower() != "bearer":
        return None

    return parts[1]


async def get_admin_auth_service(request: Request) -> AdminAuthService:
    """Get admin auth service from app state."""
    service = getattr(request.app.state, "admin_auth_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Admin service not available",
        )
    return service


AdminAuthServiceDep = Annotated[AdminAuthService, Depends(get_admin_auth_service)]
OptionalAdminToken = Annotated[str | None, Depends(get_token_from_header)]


async def require_admin_session(
    token: OptionalAdminToken,
    auth_service: AdminAuthServiceDep,
) -> str:
    """Require a valid admin session.

    Returns:
        The session token

    Raises:
        HTTPException: 401 if the token is missing, unknown or expired
    """
    try:
        await auth_service.require_session(token)
    except AppError as e:
        raise handle_app_error(e) from e

    mark_admin()
    return token  # type: ignore[return-value]


AdminSessionToken = Annotated[str, Depends(require_admin_session)]
