"""Admin session stores.

- ``InMemorySessionStore``: process-wide dict, swept periodically
- ``RedisSessionStore``: ``session:{token}`` keys with a Redis TTL

Stores only hold sessions; expiry against the TTL is decided by
``AdminAuthService.verify`` from ``created_at``, so a session still present
in a store past its TTL is treated as absent.
"""

import asyncio
import contextlib
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import orjson
import redis.asyncio as redis
import structlog

from src.core.redis import session_key
from src.storage.service import StorageUnavailableError
from src.utils.timestamps import utc_now

from .models import AdminSession


logger = structlog.get_logger(__name__)


class SessionStore(ABC):
    """Token to admin session mapping."""

    backend_name = "base"

    @abstractmethod
    async def create(self, session: AdminSession) -> None: ...

    @abstractmethod
    async def get(self, token: str) -> AdminSession | None: ...

    @abstractmethod
    async def delete(self, token: str) -> None: ...

    async def sweep(self, expired_before: datetime) -> int:
        """Delete sessions created before ``expired_before``; returns the count."""
        return 0


class InMemorySessionStore(SessionStore):
    """Sessions held in this process; lost on restart."""

    backend_name = "memory"

    def __init__(self) -> None:
        self._sessions: dict[str, AdminSession] = {}

    async def create(self, session: AdminSession) -> None:
        self._sessions[session.token] = session

    async def get(self, token: str) -> AdminSession | None:
        return self._sessions.get(token)

    async def delete(self, token: str) -> None:
        self._sessions.pop(token, None)

    async def sweep(self, expired_before: datetime) -> int:
        expired = [token for token, session in self._sessions.items() if session.created_at < expired_before]
        for token in expired:
            del self._sessions[token]
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)


class RedisSessionStore(SessionStore):
    """Sessions stored as ``{"createdAt": <epoch ms>}`` under ``session:{token}``."""

    backend_name = "redis"

    def __init__(self, client: redis.Redis, ttl: timedelta):
        self.client = client
        self.ttl = ttl

    async def create(self, session: AdminSession) -> None:
        payload = orjson.dumps({"createdAt": int(session.created_at.timestamp() * 1000)})
        try:
            await self.client.setex(session_key(session.token), int(self.ttl.total_seconds()), payload)
        except redis.RedisError as e:
            logger.error("session_write_failed", error=str(e))
            raise StorageUnavailableError("Failed to store session") from e

    async def get(self, token: str) -> AdminSession | None:
        try:
            raw = await self.client.get(session_key(token))
        except redis.RedisError as e:
            logger.error("session_read_failed", error=str(e))
            raise StorageUnavailableError("Failed to read session") from e

        if raw is None:
            return None
        try:
            created_ms = orjson.loads(raw)["createdAt"]
            created_at = datetime.fromtimestamp(created_ms / 1000, tz=UTC)
        except (orjson.JSONDecodeError, KeyError, TypeError, ValueError):
            logger.warning("session_malformed")
            return None
        return AdminSession(token=token, created_at=created_at)

    async def delete(self, token: str) -> None:
        try:
            await self.client.delete(session_key(token))
        except redis.RedisError as e:
            logger.error("session_delete_failed", error=str(e))
            raise StorageUnavailableError("Failed to delete session") from e


def create_session_store(
    backend: str, ttl: timedelta, redis_client: redis.Redis | None = None
) -> SessionStore:
    """Build the session store selected by configuration."""
    if backend == "redis":
        if redis_client is None:
            msg = "Redis session store requires a Redis connection"
            raise StorageUnavailableError(msg)
        store: SessionStore = RedisSessionStore(redis_client, ttl)
    else:
        store = InMemorySessionStore()

    logger.info("session_store_initialized", backend=store.backend_name)
    return store


async def run_session_sweeper(
    store: SessionStore,
    ttl: timedelta,
    interval_seconds: float,
    clock: Callable[[], datetime] = utc_now,
) -> None:
    """Periodically drop expired sessions until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            removed = await store.sweep(clock() - ttl)
        except StorageUnavailableError as e:
            logger.warning("session_sweep_failed", error=e.message)
            continue
        if removed:
            logger.info("sessions_swept", removed=removed)


def start_session_sweeper(
    store: SessionStore, ttl: timedelta, interval_seconds: float
) -> asyncio.Task | None:
    """Start the sweeper for stores that need one (in-memory only)."""
    if not isinstance(store, InMemorySessionStore):
        return None
    return asyncio.create_task(run_session_sweeper(store, ttl, interval_seconds))


async def stop_session_sweeper(task: asyncio.Task | None) -> None:
    if task is None:
        return
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await task
