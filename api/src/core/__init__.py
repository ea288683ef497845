# Core infrastructure
from src.core.context import (
    clear_context,
    get_context,
    get_request_id,
    set_client_ip,
    set_request_id,
)
from src.core.errors import (
    AppError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
    handle_app_error,
)
from src.core.logging import configure_structlog, get_logger
from src.core.middleware import RequestContextMiddleware, get_client_ip


__all__ = [
    "AppError",
    "ConflictError",
    "ForbiddenError",
    "NotFoundError",
    "RequestContextMiddleware",
    "UnauthorizedError",
    "ValidationError",
    "clear_context",
    "configure_structlog",
    "get_client_ip",
    "get_context",
    "get_logger",
    "get_request_id",
    "handle_app_error",
    "set_client_ip",
    "set_request_id",
]
