"""Application settings using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="termfolio", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    environment: Literal["development", "staging", "production", "testing"] = Field(
        default="development", description="Environment name"
    )
    debug: bool = Field(default=True, description="Debug mode")

    # Storage (JSON blob documents)
    storage_backend: Literal["memory", "file", "redis"] = Field(
        default="file", description="Blob store backend"
    )
    storage_dir: str = Field(
        default="data", description="Root directory for the file blob store"
    )
    storage_key_prefix: str = Field(
        default="blob:", description="Key prefix for the Redis blob store"
    )

    # Redis
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL",
    )
    redis_max_connections: int = Field(default=10, description="Max Redis connections")
    redis_socket_timeout: float = Field(default=5.0, description="Redis socket timeout")
    redis_socket_connect_timeout: float = Field(
        default=5.0, description="Redis connect timeout"
    )
    redis_retry_on_timeout: bool = Field(default=True, description="Retry on timeout")
    redis_health_check_interval: int = Field(
        default=30, description="Health check interval"
    )

    # Admin sessions
    session_backend: Literal["memory", "redis"] = Field(
        default="memory", description="Where admin sessions are kept"
    )
    session_ttl_hours: int = Field(
        default=24, description="Fixed session lifetime from login (hours)"
    )
    session_cleanup_interval_seconds: int = Field(
        default=3600,
        description="Sweep interval for expired in-memory sessions (0 disables)",
    )

    # Admin credentials
    admin_password_hash: str | None = Field(
        default=None,
        description="Password hash used when none is stored (argon2 or sha256 hex)",
    )
    admin_password_min_length: int = Field(
        default=6, description="Minimum length for a new admin password"
    )

    # Comments
    comment_max_length: int = Field(
        default=10000, description="Maximum comment length (characters)"
    )
    comment_author_max_length: int = Field(
        default=50, description="Maximum author name length (characters)"
    )
    comments_recent_limit: int = Field(
        default=50, description="Size of the recent comments cache"
    )
    comments_preview_length: int = Field(
        default=100, description="Preview length in the recent comments cache"
    )
    comments_meta_applied_ops_limit: int = Field(
        default=500, description="Applied operation keys kept for idempotent replay"
    )
    admin_comments_limit: int = Field(
        default=100, description="Raw comments returned by the admin dashboard"
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="DEBUG", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", description="Log format"
    )
    log_include_caller_info: bool = Field(
        default=True, description="Include caller info"
    )
    log_dir: str = Field(default="logs", description="Directory for log files")
    log_file_max_bytes: int = Field(
        default=10 * 1024 * 1024, description="Max size per log file (10MB default)"
    )
    log_file_backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )
    log_requests: bool = Field(
        default=True, description="Log HTTP request start/finish"
    )
    log_exclude_paths: list[str] = Field(
        default=["/health", "/health/live", "/health/ready"],
        description="Paths to exclude from request logging",
    )

    # CORS
    cors_origins: list[str] = Field(default=["*"], description="CORS origins")
    cors_allow_credentials: bool = Field(default=False, description="Allow credentials")
    cors_allow_methods: list[str] = Field(default=["*"], description="Allowed methods")
    cors_allow_headers: list[str] = Field(default=["*"], description="Allowed headers")
    cors_max_age: int = Field(default=600, description="CORS max age")

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == "testing"

    @property
    def session_ttl_seconds(self) -> int:
        """Session lifetime in seconds."""
        return self.session_ttl_hours * 3600


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
