"""Comment service: per-post comment collections.

Write path: ban check, validation, read-modify-write of the post's
collection, then a best-effort update of the global metadata. The comment
write is authoritative; a failed metadata update is logged and never fails
the request.

Each collection write replaces the whole list. There is no compare-and-swap,
so concurrent writers to one post are last-write-wins.
"""

import secrets
from typing import TYPE_CHECKING, Any

import structlog

from src.core.errors import ForbiddenError, NotFoundError, ValidationError
from src.storage.keys import COMMENTS_PREFIX, comments_key, slug_from_comments_key
from src.storage.service import BlobStore, StorageError
from src.utils.identifiers import is_valid_slug
from src.utils.timestamps import EPOCH, format_timestamp, parse_timestamp, utc_now

from .metadata import CommentsMetaService
from .models import DEFAULT_AUTHOR, Comment, CommentsMeta, create_comment
from .tree import CommentNode, build_tree


if TYPE_CHECKING:
    from src.admin.service import AdminAuthService
    from src.moderation.service import BanService


logger = structlog.get_logger(__name__)


DEFAULT_MAX_CONTENT_LENGTH = 10000
DEFAULT_MAX_AUTHOR_LENGTH = 50
DEFAULT_ADMIN_COMMENTS_LIMIT = 100


class CommentService:
    """Create, list, edit and delete comments on blog posts."""

    def __init__(
        self,
        store: BlobStore,
        meta_service: CommentsMetaService,
        ban_service: "BanService",
        auth_service: "AdminAuthService",
        max_content_length: int = DEFAULT_MAX_CONTENT_LENGTH,
        max_author_length: int = DEFAULT_MAX_AUTHOR_LENGTH,
        admin_comments_limit: int = DEFAULT_ADMIN_COMMENTS_LIMIT,
    ):
        self.store = store
        self.meta_service = meta_service
        self.ban_service = ban_service
        self.auth_service = auth_service
        self.max_content_length = max_content_length
        self.max_author_length = max_author_length
        self.admin_comments_limit = admin_comments_limit

    # ==========================================================================
    # Validation
    # ==========================================================================

    @staticmethod
    def _check_slug(slug: str) -> None:
        if not is_valid_slug(slug):
            msg = "Invalid post slug"
            raise ValidationError(msg)

    def _normalize_content(self, content: str | None) -> str:
        """Length is checked before trimming; stored content is trimmed."""
        if not isinstance(content, str) or not content.strip():
            msg = "Comment content is required"
            raise ValidationError(msg)
        if len(content) > self.max_content_length:
            msg = f"Comment is too long (max {self.max_content_length} characters)"
            raise ValidationError(msg)
        return content.strip()

    def _normalize_author(self, author: str | None) -> str:
        if not isinstance(author, str) or not author.strip():
            return DEFAULT_AUTHOR
        return author.strip()[: self.max_author_length]

    # ==========================================================================
    # Collection storage
    # ==========================================================================

    async def _load(self, slug: str) -> list[Comment]:
        """Read a post's comments in stored order, skipping malformed entries.

        Raises:
            StorageUnavailableError: If the backend fails
        """
        document = await self.store.get(comments_key(slug), list)
        if document is None:
            return []

        comments = []
        for raw in document:
            try:
                comment = Comment.from_dict(raw)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("comment_entry_malformed", post_slug=slug, error=str(e))
                continue
            if not comment.post_slug:
                comment.post_slug = slug
            comments.append(comment)
        return comments

    async def _save(self, slug: str, comments: list[Comment]) -> None:
        await self.store.put(comments_key(slug), [comment.to_dict() for comment in comments])

    async def _load_all(self) -> dict[str, list[Comment]]:
        """Read every post's collection; unreadable collections are skipped."""
        collections: dict[str, list[Comment]] = {}
        for key in await self.store.list_keys(COMMENTS_PREFIX):
            slug = slug_from_comments_key(key)
            if slug is None:
                continue
            try:
                collections[slug] = await self._load(slug)
            except StorageError as e:
                logger.warning("comment_collection_unreadable", post_slug=slug, error=e.message)
        return collections

    @staticmethod
    def _find(comments: list[Comment], comment_id: str) -> Comment:
        for comment in comments:
            if comment.id == comment_id:
                return comment
        msg = "Comment not found"
        raise NotFoundError(msg)

    # ==========================================================================
    # Public operations
    # ==========================================================================

    async def create(
        self,
        slug: str,
        content: str | None,
        author_token: str | None,
        client_ip: str,
        author: str | None = None,
        parent_id: str | None = None,
    ) -> Comment:
        """Add a comment to a post.

        Args:
            slug: Post slug
            content: Markdown content (non-empty after trim, length-limited)
            author_token: Opaque ownership token chosen by the client
            client_ip: Resolved client IP, recorded and checked against bans
            author: Display name; "anonymous" when blank
            parent_id: Comment being replied to, in the same post

        Returns:
            The stored comment (private fields included)

        Raises:
            ForbiddenError: If client_ip is banned
            ValidationError: If input is invalid or parent_id does not resolve
        """
        self._check_slug(slug)

        if await self.ban_service.is_banned(client_ip):
            logger.warning("comment_rejected_banned", post_slug=slug)
            msg = "You are not allowed to comment"
            raise ForbiddenError(msg)

        normalized_content = self._normalize_content(content)
        if not author_token:
            msg = "Author token is required"
            raise ValidationError(msg)

        comments = await self._load(slug)
        if parent_id and not any(comment.id == parent_id for comment in comments):
            msg = "Parent comment not found"
            raise ValidationError(msg)

        comment = create_comment(
            post_slug=slug,
            content=normalized_content,
            author=self._normalize_author(author),
            author_token=author_token,
            ip=client_ip,
            parent_id=parent_id or None,
        )
        comments.append(comment)
        await self._save(slug, comments)

        logger.info(
            "comment_created",
            post_slug=slug,
            comment_id=comment.id,
            parent_id=comment.parent_id,
        )

        try:
            await self.meta_service.on_comment_added(comment)
        except Exception as e:
            logger.warning("comments_meta_update_failed", op="add", comment_id=comment.id, error=str(e))

        return comment

    async def list_comments(self, slug: str) -> list[Comment]:
        """All comments of a post, oldest first."""
        self._check_slug(slug)
        comments = await self._load(slug)
        return sorted(comments, key=lambda c: parse_timestamp(c.created_at))

    async def tree(self, slug: str) -> list[CommentNode]:
        """Comments of a post nested under their parents, oldest first at each level."""
        return build_tree(await self.list_comments(slug))

    async def update(
        self,
        slug: str,
        comment_id: str,
        content: str | None,
        author_token: str | None = None,
        admin_token: str | None = None,
    ) -> Comment:
        """Edit a comment's content.

        Authorized by the comment's author token, otherwise by a valid admin
        session, checked in that order.

        Raises:
            NotFoundError: If the comment does not exist
            ForbiddenError: If neither check passes
            ValidationError: If content is invalid
        """
        self._check_slug(slug)
        normalized_content = self._normalize_content(content)

        comments = await self._load(slug)
        comment = self._find(comments, comment_id)

        is_owner = bool(
            author_token
            and comment.author_token
            and secrets.compare_digest(author_token.encode(), comment.author_token.encode())
        )
        if not is_owner and not await self.auth_service.verify(admin_token):
            logger.warning("comment_update_forbidden", post_slug=slug, comment_id=comment_id)
            msg = "Not authorized to edit this comment"
            raise ForbiddenError(msg)

        comment.content = normalized_content
        comment.updated_at = format_timestamp(utc_now())
        comment.edited = True
        await self._save(slug, comments)

        logger.info(
            "comment_updated",
            post_slug=slug,
            comment_id=comment_id,
            by_admin=not is_owner,
        )

        try:
            await self.meta_service.on_comment_edited(comment_id, normalized_content)
        except Exception as e:
            logger.warning("comments_meta_update_failed", op="edit", comment_id=comment_id, error=str(e))

        return comment

    async def remove(self, slug: str, comment_id: str) -> None:
        """Delete a comment; its replies are promoted to root comments.

        Admin authorization is enforced by the caller.

        Raises:
            NotFoundError: If the comment does not exist
        """
        self._check_slug(slug)

        comments = await self._load(slug)
        self._find(comments, comment_id)

        remaining = [comment for comment in comments if comment.id != comment_id]
        orphaned = 0
        for comment in remaining:
            if comment.parent_id == comment_id:
                comment.parent_id = None
                orphaned += 1
        await self._save(slug, remaining)

        logger.info(
            "comment_deleted",
            post_slug=slug,
            comment_id=comment_id,
            orphaned_replies=orphaned,
        )

        try:
            await self.meta_service.on_comment_removed(slug, comment_id)
        except Exception as e:
            logger.warning("comments_meta_update_failed", op="remove", comment_id=comment_id, error=str(e))

    # ==========================================================================
    # Admin operations
    # ==========================================================================

    async def admin_overview(self) -> dict[str, Any]:
        """Dashboard data: metadata, recent raw comments and new-since-login count."""
        meta = await self.meta_service.read()
        login_history = await self.auth_service.get_login_history()

        since = EPOCH
        if login_history.previous_login:
            try:
                since = parse_timestamp(login_history.previous_login)
            except ValueError:
                logger.warning("admin_previous_login_malformed")

        all_comments = [comment for comments in (await self._load_all()).values() for comment in comments]
        all_comments.sort(key=lambda c: parse_timestamp(c.created_at), reverse=True)

        new_since_last_login = sum(1 for c in all_comments if parse_timestamp(c.created_at) > since)

        return {
            "meta": meta,
            "comments": all_comments[: self.admin_comments_limit],
            "new_since_last_login": new_since_last_login,
            "last_login": format_timestamp(since),
        }

    async def reconcile_meta(self) -> CommentsMeta:
        """Rebuild the metadata document from every comment collection."""
        return await self.meta_service.rebuild(await self._load_all())
