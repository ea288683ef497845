"""Admin authentication service.

Single-admin model: one password, checked against the first available of
- the hash stored in ``content/admin.json``
- the ``ADMIN_PASSWORD_HASH`` setting
- the default hash (of "password")

Successful logins mint an opaque session token valid for a fixed TTL from
creation (no sliding expiration).
"""

from collections.abc import Callable
from datetime import datetime, timedelta

import structlog

from src.core.errors import UnauthorizedError, ValidationError
from src.storage.keys import ADMIN_CONFIG_KEY
from src.storage.service import BlobStore, StorageError
from src.utils.identifiers import generate_session_token
from src.utils.timestamps import format_timestamp, utc_now

from .models import AdminConfig, AdminSession
from .security import DEFAULT_PASSWORD_HASH, hash_password, verify_password
from .sessions import SessionStore


logger = structlog.get_logger(__name__)


DEFAULT_SESSION_TTL = timedelta(hours=24)
DEFAULT_MIN_PASSWORD_LENGTH = 6


class AdminAuthService:
    """Admin login, session verification and credential changes."""

    def __init__(
        self,
        store: BlobStore,
        sessions: SessionStore,
        session_ttl: timedelta = DEFAULT_SESSION_TTL,
        configured_password_hash: str | None = None,
        min_password_length: int = DEFAULT_MIN_PASSWORD_LENGTH,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.sessions = sessions
        self.session_ttl = session_ttl
        self.configured_password_hash = configured_password_hash
        self.min_password_length = min_password_length
        self.clock = clock

    # ==========================================================================
    # Admin config
    # ==========================================================================

    async def get_admin_config(self) -> AdminConfig:
        """Read the admin config; absent or malformed reads as empty."""
        document = await self.store.get(ADMIN_CONFIG_KEY, dict)
        if document is None:
            return AdminConfig()
        return AdminConfig.from_dict(document)

    async def _save_admin_config(self, config: AdminConfig) -> None:
        await self.store.put(ADMIN_CONFIG_KEY, config.to_dict())

    async def get_login_history(self) -> AdminConfig:
        """Admin config for display; empty when unreadable."""
        try:
            return await self.get_admin_config()
        except StorageError as e:
            logger.warning("admin_config_unreadable", error=e.message)
            return AdminConfig()

    def _effective_hash(self, config: AdminConfig) -> tuple[str, bool]:
        """Hash to check against, and whether it came from the stored config."""
        if config.password_hash:
            return config.password_hash, True
        if self.configured_password_hash:
            return self.configured_password_hash, False
        return DEFAULT_PASSWORD_HASH, False

    def _check_password(self, config: AdminConfig, password: str) -> bool:
        password_hash, stored = self._effective_hash(config)
        is_valid, new_hash = verify_password(password, password_hash)
        if is_valid and new_hash and stored:
            config.password_hash = new_hash
            logger.info("admin_password_rehashed")
        return is_valid

    # ==========================================================================
    # Sessions
    # ==========================================================================

    async def login(self, password: str) -> tuple[str, datetime]:
        """Exchange the admin password for a session token.

        Returns:
            Tuple of (token, expires_at)

        Raises:
            ValidationError: If password is empty
            UnauthorizedError: If password is wrong
        """
        if not password:
            msg = "Password required"
            raise ValidationError(msg)

        config = await self.get_admin_config()
        if not self._check_password(config, password):
            logger.warning("admin_login_failed")
            msg = "Invalid password"
            raise UnauthorizedError(msg)

        now = self.clock()
        token = generate_session_token()
        await self.sessions.create(AdminSession(token=token, created_at=now))

        config.previous_login = config.last_login
        config.last_login = format_timestamp(now)
        try:
            await self._save_admin_config(config)
        except StorageError as e:
            logger.warning("admin_last_login_not_recorded", error=e.message)

        logger.info("admin_logged_in")
        return token, now + self.session_ttl

    async def verify(self, token: str | None) -> bool:
        """True if token names a stored session younger than the TTL."""
        if not token:
            return False

        session = await self.sessions.get(token)
        if session is None:
            return False

        if self.clock() - session.created_at >= self.session_ttl:
            await self.sessions.delete(token)
            logger.info("admin_session_expired")
            return False
        return True

    async def require_session(self, token: str | None) -> str:
        """Return the token if valid.

        Raises:
            UnauthorizedError: If token is missing, unknown or expired
        """
        if not await self.verify(token):
            raise UnauthorizedError
        return token  # type: ignore[return-value]

    async def logout(self, token: str | None) -> None:
        """Destroy the caller's session."""
        await self.require_session(token)
        await self.sessions.delete(token)  # type: ignore[arg-type]
        logger.info("admin_logged_out")

    async def change_password(
        self, token: str | None, current_password: str, new_password: str
    ) -> None:
        """Replace the admin password; other sessions stay valid.

        Raises:
            UnauthorizedError: If the session is invalid or current_password is wrong
            ValidationError: If a password is missing or new_password is too short
        """
        await self.require_session(token)

        if not current_password or not new_password:
            msg = "Current and new password required"
            raise ValidationError(msg)
        if len(new_password) < self.min_password_length:
            msg = f"New password must be at least {self.min_password_length} characters"
            raise ValidationError(msg)

        config = await self.get_admin_config()
        if not self._check_password(config, current_password):
            logger.warning("admin_password_change_rejected")
            msg = "Current password is incorrect"
            raise UnauthorizedError(msg)

        config.password_hash = hash_password(new_password)
        await self._save_admin_config(config)
        logger.info("admin_password_changed")
