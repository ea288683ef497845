"""Maintenance of the global comments metadata document.

The metadata (totals, per-post counts, recent comments cache) is updated by
applying a delta after every comment mutation. Deltas are keyed
(``add:<id>``, ``remove:<id>``) and recorded in a bounded ``appliedOps``
list, so applying the same delta twice changes nothing. ``rebuild``
re-derives the whole document from the comment collections.

Reads here are strict: a storage failure aborts the update rather than
writing a default document over the real one.
"""

import structlog

from src.storage.keys import COMMENTS_META_KEY
from src.storage.service import BlobStore, StorageUnavailableError
from src.utils.timestamps import parse_timestamp

from .models import Comment, CommentsMeta, RecentComment
from .preview import DEFAULT_PREVIEW_LENGTH, make_preview


logger = structlog.get_logger(__name__)


DEFAULT_RECENT_LIMIT = 50
DEFAULT_APPLIED_OPS_LIMIT = 500


def add_op_key(comment_id: str) -> str:
    return f"add:{comment_id}"


def remove_op_key(comment_id: str) -> str:
    return f"remove:{comment_id}"


class CommentsMetaService:
    """Keeps ``content/comments-meta.json`` in step with the comment collections."""

    def __init__(
        self,
        store: BlobStore,
        recent_limit: int = DEFAULT_RECENT_LIMIT,
        preview_length: int = DEFAULT_PREVIEW_LENGTH,
        applied_ops_limit: int = DEFAULT_APPLIED_OPS_LIMIT,
    ):
        self.store = store
        self.recent_limit = recent_limit
        self.preview_length = preview_length
        self.applied_ops_limit = applied_ops_limit

    # ==========================================================================
    # Reads
    # ==========================================================================

    async def load(self) -> CommentsMeta:
        """Read the metadata; absent or malformed reads as empty.

        Raises:
            StorageUnavailableError: If the backend fails
        """
        document = await self.store.get(COMMENTS_META_KEY, dict)
        if document is None:
            return CommentsMeta()
        return CommentsMeta.from_dict(document)

    async def read(self) -> CommentsMeta:
        """Read the metadata for display, degrading to empty on storage failure."""
        try:
            return await self.load()
        except StorageUnavailableError as e:
            logger.warning("comments_meta_unreadable", error=e.message)
            return CommentsMeta()

    async def save(self, meta: CommentsMeta) -> None:
        await self.store.put(COMMENTS_META_KEY, meta.to_dict())

    # ==========================================================================
    # Deltas
    # ==========================================================================

    async def on_comment_added(self, comment: Comment) -> bool:
        """Count a new comment and put its preview at the head of the recent cache.

        Returns:
            False if this addition was already applied
        """
        op = add_op_key(comment.id)
        meta = await self.load()
        if op in meta.applied_ops:
            logger.debug("comments_meta_op_skipped", op=op)
            return False

        slug = comment.post_slug
        meta.total_comments += 1
        meta.comments_by_post[slug] = meta.comments_by_post.get(slug, 0) + 1

        entry = RecentComment(
            id=comment.id,
            post_slug=slug,
            author=comment.author,
            preview=make_preview(comment.content, self.preview_length),
            created_at=comment.created_at,
        )
        meta.recent_comments = [entry, *meta.recent_comments][: self.recent_limit]

        self._record_op(meta, op)
        await self.save(meta)
        return True

    async def on_comment_removed(self, post_slug: str, comment_id: str) -> bool:
        """Uncount a deleted comment (floor 0) and drop it from the recent cache.

        Returns:
            False if this removal was already applied
        """
        op = remove_op_key(comment_id)
        meta = await self.load()
        if op in meta.applied_ops:
            logger.debug("comments_meta_op_skipped", op=op)
            return False

        meta.total_comments = max(0, meta.total_comments - 1)
        meta.comments_by_post[post_slug] = max(0, meta.comments_by_post.get(post_slug, 0) - 1)
        meta.recent_comments = [entry for entry in meta.recent_comments if entry.id != comment_id]

        self._record_op(meta, op)
        await self.save(meta)
        return True

    async def on_comment_edited(self, comment_id: str, new_content: str) -> bool:
        """Refresh the cached preview of an edited comment.

        Returns:
            False (and nothing written) if the comment is not in the cache
        """
        meta = await self.load()
        for entry in meta.recent_comments:
            if entry.id == comment_id:
                entry.preview = make_preview(new_content, self.preview_length)
                await self.save(meta)
                return True
        return False

    def _record_op(self, meta: CommentsMeta, op: str) -> None:
        meta.applied_ops.append(op)
        if len(meta.applied_ops) > self.applied_ops_limit:
            meta.applied_ops = meta.applied_ops[-self.applied_ops_limit :]

    # ==========================================================================
    # Reconciliation
    # ==========================================================================

    async def rebuild(self, collections: dict[str, list[Comment]]) -> CommentsMeta:
        """Re-derive the metadata from the authoritative comment collections.

        Args:
            collections: Live comments by post slug

        Returns:
            The metadata that was written
        """
        previous = await self.read()

        all_comments = [comment for comments in collections.values() for comment in comments]
        all_comments.sort(key=lambda c: parse_timestamp(c.created_at), reverse=True)

        meta = CommentsMeta(
            total_comments=len(all_comments),
            comments_by_post={slug: len(comments) for slug, comments in collections.items() if comments},
            recent_comments=[
                RecentComment(
                    id=comment.id,
                    post_slug=comment.post_slug,
                    author=comment.author,
                    preview=make_preview(comment.content, self.preview_length),
                    created_at=comment.created_at,
                )
                for comment in all_comments[: self.recent_limit]
            ],
            applied_ops=list(previous.applied_ops),
        )

        await self.save(meta)
        logger.info(
            "comments_meta_rebuilt",
            total_comments=meta.total_comments,
            posts=len(meta.comments_by_post),
        )
        return meta

