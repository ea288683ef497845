"""Error taxonomy shared by the comment, moderation and admin services.

Services raise these; routers convert them with ``handle_app_error``.
"""

from fastapi import HTTPException, status


class AppError(Exception):
    """Base application error."""

    def __init__(self, message: str, code: str = "app_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(AppError):
    """Malformed, missing or oversized input."""

    def __init__(self, message: str = "Invalid input"):
        super().__init__(message, "validation_error")


class ForbiddenError(AppError):
    """Banned IP or ownership mismatch."""

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message, "forbidden")


class UnauthorizedError(AppError):
    """Missing, invalid or expired admin session, or bad credentials."""

    def __init__(self, message: str = "Admin authentication required"):
        super().__init__(message, "unauthorized")


class NotFoundError(AppError):
    """Unknown post, comment or ban."""

    def __init__(self, message: str = "Not found"):
        super().__init__(message, "not_found")


class ConflictError(AppError):
    """Duplicate resource."""

    def __init__(self, message: str = "Already exists"):
        super().__init__(message, "conflict")


STATUS_BY_CODE = {
    "validation_error": status.HTTP_400_BAD_REQUEST,
    "forbidden": status.HTTP_403_FORBIDDEN,
    "unauthorized": status.HTTP_401_UNAUTHORIZED,
    "not_found": status.HTTP_404_NOT_FOUND,
    "conflict": status.HTTP_409_CONFLICT,
}


def handle_app_error(error: AppError) -> HTTPException:
    """Convert application errors to HTTP exceptions.

    Args:
        error: Application error (storage errors included)

    Returns:
        HTTPException with appropriate status code
    """
    status_code = STATUS_BY_CODE.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    headers = None
    if status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}

    return HTTPException(
        status_code=status_code,
        detail=error.message,
        headers=headers,
    )
