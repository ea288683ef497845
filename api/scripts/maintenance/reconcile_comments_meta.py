"""Maintenance: rebuild the comments metadata document.

Re-derives ``content/comments-meta.json`` (totals, per-post counts, recent
comments) from every post's comment collection. Use after a metadata update
was lost, or after editing comment files by hand.

Usage:
    cd api && uv run python -m scripts.maintenance.reconcile_comments_meta
"""

import asyncio
import sys
from datetime import timedelta
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import structlog

from src.admin.service import AdminAuthService
from src.admin.sessions import InMemorySessionStore
from src.comments.metadata import CommentsMetaService
from src.comments.service import CommentService
from src.config.settings import get_settings
from src.core.logging import configure_structlog
from src.core.redis import init_redis, shutdown_redis
from src.moderation.service import BanService
from src.storage.service import create_blob_store


logger = structlog.get_logger(__name__)


async def run_reconciliation() -> None:
    """Rebuild the metadata against the configured blob store."""
    settings = get_settings()
    configure_structlog(settings)

    redis_client = await init_redis() if settings.storage_backend == "redis" else None
    store = create_blob_store(settings, redis_client)

    meta_service = CommentsMetaService(
        store,
        recent_limit=settings.comments_recent_limit,
        preview_length=settings.comments_preview_length,
        applied_ops_limit=settings.comments_meta_applied_ops_limit,
    )
    comment_service = CommentService(
        store=store,
        meta_service=meta_service,
        ban_service=BanService(store),
        auth_service=AdminAuthService(
            store, InMemorySessionStore(), timedelta(hours=settings.session_ttl_hours)
        ),
    )

    logger.info("reconciliation_starting", storage=store.backend_name)
    try:
        before = await meta_service.read()
        after = await comment_service.reconcile_meta()
        logger.info(
            "reconciliation_completed",
            total_before=before.total_comments,
            total_after=after.total_comments,
            posts=len(after.comments_by_post),
        )
    finally:
        await store.close()
        await shutdown_redis()


if __name__ == "__main__":
    asyncio.run(run_reconciliation())
