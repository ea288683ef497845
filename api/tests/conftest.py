"""Shared test fixtures.

Environment is set before the application is imported: in-memory storage
and sessions, logs in a temporary directory.
"""

import os
import tempfile
from collections.abc import Iterator
from datetime import UTC, datetime, timedelta

import pytest


os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("SESSION_BACKEND", "memory")
os.environ.setdefault("LOG_FORMAT", "console")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="termfolio-logs-"))
os.environ.pop("ADMIN_PASSWORD_HASH", None)

from fastapi.testclient import TestClient  # noqa: E402

from src.admin.service import AdminAuthService  # noqa: E402
from src.admin.sessions import InMemorySessionStore  # noqa: E402
from src.comments.metadata import CommentsMetaService  # noqa: E402
from src.comments.service import CommentService  # noqa: E402
from src.main import create_app  # noqa: E402
from src.moderation.service import BanService  # noqa: E402
from src.storage.service import MemoryBlobStore  # noqa: E402


class FakeClock:
    """Controllable clock for session expiry tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 15, 10, 30, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@pytest.fixture
def client() -> Iterator[TestClient]:
    """Test client over a fresh app with empty in-memory storage."""
    app = create_app()
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_token(client: TestClient) -> str:
    """Session token from logging in with the default password."""
    response = client.post("/admin/login", json={"password": "password"})
    assert response.status_code == 200
    return response.json()["token"]


@pytest.fixture
def admin_headers(admin_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def store() -> MemoryBlobStore:
    return MemoryBlobStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def auth_service(
    store: MemoryBlobStore, session_store: InMemorySessionStore, clock: FakeClock
) -> AdminAuthService:
    return AdminAuthService(
        store=store,
        sessions=session_store,
        session_ttl=timedelta(hours=24),
        clock=clock,
    )


@pytest.fixture
def ban_service(store: MemoryBlobStore) -> BanService:
    return BanService(store)


@pytest.fixture
def meta_service(store: MemoryBlobStore) -> CommentsMetaService:
    return CommentsMetaService(store)


@pytest.fixture
def comment_service(
    store: MemoryBlobStore,
    meta_service: CommentsMetaService,
    ban_service: BanService,
    auth_service: AdminAuthService,
) -> CommentService:
    return CommentService(
        store=store,
        meta_service=meta_service,
        ban_service=ban_service,
        auth_service=auth_service,
    )
