"""Termfolio comments API - Main Application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import timedelta
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.admin.router import router as admin_router
from src.admin.service import AdminAuthService
from src.admin.sessions import (
    create_session_store,
    start_session_sweeper,
    stop_session_sweeper,
)
from src.comments.metadata import CommentsMetaService
from src.comments.router import admin_router as comments_admin_router
from src.comments.router import router as comments_router
from src.comments.service import CommentService
from src.config import get_settings
from src.config.settings import Settings
from src.core.context import get_request_id
from src.core.logging import configure_structlog, get_logger
from src.core.middleware import RequestContextMiddleware
from src.core.redis import init_redis, shutdown_redis
from src.health import router as health_router
from src.moderation.router import router as bans_router
from src.moderation.service import BanService
from src.storage.service import BlobStore, create_blob_store


# Configure logging early (before creating logger)
settings = get_settings()
configure_structlog(settings, log_dir=Path(settings.log_dir))

logger = get_logger(__name__)


def build_services(app: FastAPI, settings: Settings, store: BlobStore, sessions) -> None:
    """Wire services onto ``app.state`` for dependency injection."""
    app.state.blob_store = store

    app.state.admin_auth_service = AdminAuthService(
        store=store,
        sessions=sessions,
        session_ttl=timedelta(hours=settings.session_ttl_hours),
        configured_password_hash=settings.admin_password_hash,
        min_password_length=settings.admin_password_min_length,
    )
    app.state.ban_service = BanService(store)
    app.state.comments_meta_service = CommentsMetaService(
        store,
        recent_limit=settings.comments_recent_limit,
        preview_length=settings.comments_preview_length,
        applied_ops_limit=settings.comments_meta_applied_ops_limit,
    )
    app.state.comment_service = CommentService(
        store=store,
        meta_service=app.state.comments_meta_service,
        ban_service=app.state.ban_service,
        auth_service=app.state.admin_auth_service,
        max_content_length=settings.comment_max_length,
        max_author_length=settings.comment_author_max_length,
        admin_comments_limit=settings.admin_comments_limit,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(
        "starting_application",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    # Redis is only required when a backend is configured to use it
    redis_client = None
    if "redis" in (settings.storage_backend, settings.session_backend):
        redis_client = await init_redis()

    session_ttl = timedelta(hours=settings.session_ttl_hours)
    store = create_blob_store(settings, redis_client)
    sessions = create_session_store(settings.session_backend, session_ttl, redis_client)
    build_services(app, settings, store, sessions)
    logger.info("services_initialized", storage=store.backend_name, sessions=sessions.backend_name)

    sweeper = start_session_sweeper(sessions, session_ttl, settings.session_cleanup_interval_seconds)

    yield

    # Shutdown
    logger.info("shutting_down_application")
    await stop_session_sweeper(sweeper)
    await store.close()
    await shutdown_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    # SECURITY: Always set debug=False to prevent Starlette's ServerErrorMiddleware
    # from exposing stack traces in responses.
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Blog comments and moderation API",
        debug=False,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
    )

    # Request context middleware (must be added first - outermost)
    app.add_middleware(
        RequestContextMiddleware,
        log_requests=settings.log_requests,
        exclude_paths=settings.log_exclude_paths,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        max_age=settings.cors_max_age,
    )

    def _get_request_id_safe(request: Request) -> str | None:
        """Get request_id from request state or context."""
        if hasattr(request.state, "request_id"):
            return request.state.request_id
        return get_request_id()

    # Global exception handlers (security: never expose stack traces)
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> ORJSONResponse:
        """Handle HTTP exceptions with safe error messages."""
        logger.warning(
            "http_exception",
            status_code=exc.status_code,
            detail=str(exc.detail),
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
            content={
                "error": True,
                "message": str(exc.detail)
                if exc.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR
                else "Internal server error",
                "status_code": exc.status_code,
                "request_id": _get_request_id_safe(request),
            },
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        """Render malformed request bodies as 400 with per-field details."""
        logger.warning(
            "validation_error",
            errors=[{"loc": err.get("loc"), "type": err.get("type")} for err in exc.errors()],
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": True,
                "message": "Validation error",
                "status_code": status.HTTP_400_BAD_REQUEST,
                "request_id": _get_request_id_safe(request),
                "details": [
                    {
                        "field": ".".join(str(loc) for loc in err.get("loc", [])),
                        "message": err.get("msg", "Invalid value"),
                    }
                    for err in exc.errors()
                ],
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> ORJSONResponse:
        """Catch-all handler for unhandled exceptions.

        SECURITY: Never expose stack traces or internal error details to users.
        """
        logger.exception(
            "unhandled_exception",
            error_type=type(exc).__name__,
            error_message=str(exc),
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": True,
                "message": "An unexpected error occurred. Please try again later.",
                "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR,
                "request_id": _get_request_id_safe(request),
            },
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(comments_router)
    app.include_router(comments_admin_router)
    app.include_router(bans_router)
    app.include_router(admin_router)

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {
            "message": "Termfolio comments API",
            "version": settings.app_version,
        }

    return app


app = create_app()
