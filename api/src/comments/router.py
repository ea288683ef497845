"""Comment system API endpoints.

Provides routes for:
- Public comment listing (flat and threaded) and creation
- Comment editing by owner token or admin session
- Comment deletion and the moderation dashboard (admin)
"""

from fastapi import APIRouter, status

from src.admin.dependencies import AdminSessionToken, OptionalAdminToken
from src.core.errors import AppError, handle_app_error

from .dependencies import ClientIp, CommentServiceDep
from .schemas import (
    AdminCommentsResponse,
    CommentNodeResponse,
    CommentResponse,
    CommentsMetaResponse,
    CreateCommentRequest,
    MessageResponse,
    UpdateCommentRequest,
)


router = APIRouter(prefix="/comments", tags=["comments"])
admin_router = APIRouter(prefix="/admin/comments", tags=["admin"])


# ==============================================================================
# Public
# ==============================================================================


@router.get(
    "/{slug}",
    response_model=list[CommentResponse],
    summary="List comments of a post",
)
async def list_comments(
    slug: str,
    comment_service: CommentServiceDep,
) -> list[CommentResponse]:
    """All comments of a post, oldest first, without private fields."""
    try:
        comments = await comment_service.list_comments(slug)
    except AppError as e:
        raise handle_app_error(e) from e
    return [CommentResponse.from_comment(c) for c in comments]


@router.get(
    "/{slug}/tree",
    response_model=list[CommentNodeResponse],
    summary="List comments of a post as a thread tree",
)
async def get_comment_tree(
    slug: str,
    comment_service: CommentServiceDep,
) -> list[CommentNodeResponse]:
    """Comments nested under their parents; orphaned replies are roots."""
    try:
        nodes = await comment_service.tree(slug)
    except AppError as e:
        raise handle_app_error(e) from e
    return [CommentNodeResponse.from_node(node) for node in nodes]


@router.post(
    "/{slug}",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create comment",
)
async def create_comment(
    slug: str,
    data: CreateCommentRequest,
    comment_service: CommentServiceDep,
    client_ip: ClientIp,
) -> CommentResponse:
    """Post an anonymous comment.

    The client keeps ``authorToken`` to edit the comment later.
    Rejected with 403 when the client IP is banned.
    """
    try:
        comment = await comment_service.create(
            slug,
            content=data.content,
            author_token=data.author_token,
            client_ip=client_ip,
            author=data.author,
            parent_id=data.parent_id,
        )
    except AppError as e:
        raise handle_app_error(e) from e
    return CommentResponse.from_comment(comment)


@router.put(
    "/{slug}/{comment_id}",
    response_model=CommentResponse,
    summary="Edit comment",
)
async def update_comment(
    slug: str,
    comment_id: str,
    data: UpdateCommentRequest,
    comment_service: CommentServiceDep,
    admin_token: OptionalAdminToken,
) -> CommentResponse:
    """Edit a comment as its author (``authorToken``) or as admin (Bearer)."""
    try:
        comment = await comment_service.update(
            slug,
            comment_id,
            content=data.content,
            author_token=data.author_token,
            admin_token=admin_token,
        )
    except AppError as e:
        raise handle_app_error(e) from e
    return CommentResponse.from_comment(comment)


@router.delete(
    "/{slug}/{comment_id}",
    response_model=MessageResponse,
    summary="Delete comment (admin)",
)
async def delete_comment(
    slug: str,
    comment_id: str,
    comment_service: CommentServiceDep,
    _admin: AdminSessionToken,
) -> MessageResponse:
    """Delete a comment; its replies become root comments."""
    try:
        await comment_service.remove(slug, comment_id)
    except AppError as e:
        raise handle_app_error(e) from e
    return MessageResponse(message="Comment deleted")


# ==============================================================================
# Admin
# ==============================================================================


@admin_router.get(
    "",
    response_model=AdminCommentsResponse,
    summary="Comment moderation dashboard",
)
async def admin_list_comments(
    comment_service: CommentServiceDep,
    _admin: AdminSessionToken,
) -> AdminCommentsResponse:
    """Totals, recent previews and the newest comments with private fields."""
    try:
        overview = await comment_service.admin_overview()
    except AppError as e:
        raise handle_app_error(e) from e
    return AdminCommentsResponse.from_overview(overview)


@admin_router.post(
    "/reconcile",
    response_model=CommentsMetaResponse,
    summary="Rebuild comment metadata",
)
async def reconcile_comments_meta(
    comment_service: CommentServiceDep,
    _admin: AdminSessionToken,
) -> CommentsMetaResponse:
    """Re-derive totals and recent comments from every post's collection."""
    try:
        meta = await comment_service.reconcile_meta()
    except AppError as e:
        raise handle_app_error(e) from e
    return CommentsMetaResponse.from_meta(meta)
