"""Tests for the comments metadata maintainer."""

from unittest.mock import AsyncMock

import pytest

from src.comments.metadata import CommentsMetaService
from src.comments.models import Comment, CommentsMeta
from src.storage.keys import COMMENTS_META_KEY
from src.storage.service import MemoryBlobStore, StorageUnavailableError


def make_comment(
    comment_id: str,
    slug: str = "post",
    created_at: str = "2024-01-15T10:30:00.000Z",
    content: str = "hello",
) -> Comment:
    return Comment(
        id=comment_id,
        post_slug=slug,
        parent_id=None,
        author="anonymous",
        author_token="tok",
        content=content,
        ip="127.0.0.1",
        created_at=created_at,
    )


async def stored_meta(store: MemoryBlobStore) -> dict:
    return await store.get(COMMENTS_META_KEY)


class TestOnCommentAdded:
    @pytest.mark.asyncio
    async def test_first_write_creates_document(
        self, store: MemoryBlobStore, meta_service: CommentsMetaService
    ) -> None:
        await meta_service.on_comment_added(make_comment("c1"))

        meta = await stored_meta(store)
        assert meta["totalComments"] == 1
        assert meta["commentsByPost"] == {"post": 1}
        assert meta["recentComments"][0]["id"] == "c1"
        assert meta["recentComments"][0]["preview"] == "hello"

    @pytest.mark.asyncio
    async def test_newest_first(self, store: MemoryBlobStore, meta_service: CommentsMetaService) -> None:
        await meta_service.on_comment_added(make_comment("c1"))
        await meta_service.on_comment_added(make_comment("c2", slug="other"))

        meta = await stored_meta(store)
        assert meta["totalComments"] == 2
        assert meta["commentsByPost"] == {"post": 1, "other": 1}
        assert [entry["id"] for entry in meta["recentComments"]] == ["c2", "c1"]

    @pytest.mark.asyncio
    async def test_recent_capped_at_50(self, store: MemoryBlobStore, meta_service: CommentsMetaService) -> None:
        for i in range(55):
            await meta_service.on_comment_added(make_comment(f"c{i}"))

        meta = await stored_meta(store)
        assert meta["totalComments"] == 55
        assert len(meta["recentComments"]) == 50
        assert meta["recentComments"][0]["id"] == "c54"

    @pytest.mark.asyncio
    async def test_replay_is_noop(self, store: MemoryBlobStore, meta_service: CommentsMetaService) -> None:
        comment = make_comment("c1")
        assert await meta_service.on_comment_added(comment) is True
        assert await meta_service.on_comment_added(comment) is False

        meta = await stored_meta(store)
        assert meta["totalComments"] == 1
        assert len(meta["recentComments"]) == 1

    @pytest.mark.asyncio
    async def test_applied_ops_bounded(self, store: MemoryBlobStore) -> None:
        service = CommentsMetaService(store, applied_ops_limit=3)
        for i in range(5):
            await service.on_comment_added(make_comment(f"c{i}"))

        meta = await stored_meta(store)
        assert meta["appliedOps"] == ["add:c2", "add:c3", "add:c4"]

    @pytest.mark.asyncio
    async def test_read_failure_aborts_without_write(self, store: MemoryBlobStore) -> None:
        await store.put(COMMENTS_META_KEY, {"totalComments": 7, "commentsByPost": {"post": 7}})
        store._read = AsyncMock(side_effect=StorageUnavailableError())
        store._write = AsyncMock()
        service = CommentsMetaService(store)

        with pytest.raises(StorageUnavailableError):
            await service.on_comment_added(make_comment("c1"))

        store._write.assert_not_awaited()


class TestOnCommentRemoved:
    @pytest.mark.asyncio
    async def test_decrements_and_drops_recent(
        self, store: MemoryBlobStore, meta_service: CommentsMetaService
    ) -> None:
        await meta_service.on_comment_added(make_comment("c1"))
        await meta_service.on_comment_added(make_comment("c2"))

        await meta_service.on_comment_removed("post", "c1")

        meta = await stored_meta(store)
        assert meta["totalComments"] == 1
        assert meta["commentsByPost"] == {"post": 1}
        assert [entry["id"] for entry in meta["recentComments"]] == ["c2"]

    @pytest.mark.asyncio
    async def test_counters_floor_at_zero(self, store: MemoryBlobStore, meta_service: CommentsMetaService) -> None:
        await meta_service.on_comment_removed("post", "ghost")

        meta = await stored_meta(store)
        assert meta["totalComments"] == 0
        assert meta["commentsByPost"] == {"post": 0}

    @pytest.mark.asyncio
    async def test_replay_is_noop(self, store: MemoryBlobStore, meta_service: CommentsMetaService) -> None:
        await meta_service.on_comment_added(make_comment("c1"))
        await meta_service.on_comment_added(make_comment("c2"))

        await meta_service.on_comment_removed("post", "c1")
        await meta_service.on_comment_removed("post", "c1")

        meta = await stored_meta(store)
        assert meta["totalComments"] == 1


class TestOnCommentEdited:
    @pytest.mark.asyncio
    async def test_refreshes_preview(self, store: MemoryBlobStore, meta_service: CommentsMetaService) -> None:
        await meta_service.on_comment_added(make_comment("c1", content="old"))

        assert await meta_service.on_comment_edited("c1", "**new** text") is True

        meta = await stored_meta(store)
        assert meta["recentComments"][0]["preview"] == "new text"
        assert meta["totalComments"] == 1

    @pytest.mark.asyncio
    async def test_absent_id_writes_nothing(self, store: MemoryBlobStore) -> None:
        store._write = AsyncMock()
        service = CommentsMetaService(store)

        assert await service.on_comment_edited("missing", "text") is False
        store._write.assert_not_awaited()


class TestRead:
    @pytest.mark.asyncio
    async def test_unreadable_degrades_to_empty(self, store: MemoryBlobStore) -> None:
        store._read = AsyncMock(side_effect=StorageUnavailableError())
        service = CommentsMetaService(store)

        meta = await service.read()

        assert meta == CommentsMeta()

    @pytest.mark.asyncio
    async def test_malformed_entries_tolerated(self, store: MemoryBlobStore, meta_service: CommentsMetaService) -> None:
        await store.put(
            COMMENTS_META_KEY,
            {
                "totalComments": -4,
                "commentsByPost": {"post": "three"},
                "recentComments": [{"id": "ok", "postSlug": "post", "createdAt": "x"}, {"bad": True}],
            },
        )

        meta = await meta_service.read()

        assert meta.total_comments == 0
        assert meta.comments_by_post == {"post": 0}
        assert [entry.id for entry in meta.recent_comments] == ["ok"]


class TestRebuild:
    @pytest.mark.asyncio
    async def test_rederives_from_collections(
        self, store: MemoryBlobStore, meta_service: CommentsMetaService
    ) -> None:
        await store.put(COMMENTS_META_KEY, {"totalComments": 99, "commentsByPost": {"gone": 5}})
        collections = {
            "a": [
                make_comment("a1", "a", "2024-01-01T00:00:00.000Z"),
                make_comment("a2", "a", "2024-01-03T00:00:00.000Z"),
            ],
            "b": [make_comment("b1", "b", "2024-01-02T00:00:00.000Z")],
            "empty": [],
        }

        meta = await meta_service.rebuild(collections)

        assert meta.total_comments == 3
        assert meta.comments_by_post == {"a": 2, "b": 1}
        assert [entry.id for entry in meta.recent_comments] == ["a2", "b1", "a1"]
        assert (await stored_meta(store))["totalComments"] == 3

    @pytest.mark.asyncio
    async def test_keeps_applied_ops(self, store: MemoryBlobStore, meta_service: CommentsMetaService) -> None:
        comment = make_comment("c1")
        await meta_service.on_comment_added(comment)

        await meta_service.rebuild({"post": [comment]})
        assert await meta_service.on_comment_added(comment) is False

        meta = await stored_meta(store)
        assert meta["totalComments"] == 1
