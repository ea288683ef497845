"""Tests for the JSON blob store backends."""

from pathlib import Path
from unittest.mock import AsyncMock

import pytest
import redis.asyncio as redis

from src.storage.keys import (
    COMMENTS_META_KEY,
    COMMENTS_PREFIX,
    comments_key,
    slug_from_comments_key,
)
from src.storage.service import (
    FileBlobStore,
    InvalidKeyError,
    MemoryBlobStore,
    RedisBlobStore,
    StorageUnavailableError,
    validate_key,
)


class TestKeys:
    """Tests for document key helpers."""

    def test_comments_key_layout(self) -> None:
        assert comments_key("hello-world") == "content/comments-hello-world.json"

    def test_slug_from_comments_key(self) -> None:
        assert slug_from_comments_key("content/comments-hello-world.json") == "hello-world"

    def test_meta_key_is_not_a_collection(self) -> None:
        assert slug_from_comments_key(COMMENTS_META_KEY) is None

    def test_unrelated_key_is_not_a_collection(self) -> None:
        assert slug_from_comments_key("content/banned-ips.json") is None

    @pytest.mark.parametrize(
        "key",
        ["", "/etc/passwd", "content/../admin.json", "content//x.json", "a b.json", "..\\x"],
    )
    def test_validate_key_rejects_escapes(self, key: str) -> None:
        with pytest.raises(InvalidKeyError):
            validate_key(key)


class TestMemoryBlobStore:
    """Tests for the in-memory backend."""

    @pytest.mark.asyncio
    async def test_absent_document_is_none(self) -> None:
        store = MemoryBlobStore()
        assert await store.get("content/missing.json") is None

    @pytest.mark.asyncio
    async def test_put_then_get(self) -> None:
        store = MemoryBlobStore()
        await store.put("content/admin.json", {"passwordHash": "abc"})
        assert await store.get("content/admin.json") == {"passwordHash": "abc"}

    @pytest.mark.asyncio
    async def test_returned_document_is_a_copy(self) -> None:
        store = MemoryBlobStore()
        await store.put("content/x.json", [1, 2])
        document = await store.get("content/x.json")
        document.append(3)
        assert await store.get("content/x.json") == [1, 2]

    @pytest.mark.asyncio
    async def test_malformed_json_reads_as_absent(self) -> None:
        store = MemoryBlobStore()
        store._blobs["content/x.json"] = b"{not json"
        assert await store.get("content/x.json") is None

    @pytest.mark.asyncio
    async def test_wrong_top_level_type_reads_as_absent(self) -> None:
        store = MemoryBlobStore()
        await store.put("content/comments-a.json", {"not": "a list"})
        assert await store.get("content/comments-a.json", list) is None

    @pytest.mark.asyncio
    async def test_list_keys_by_prefix(self) -> None:
        store = MemoryBlobStore()
        await store.put(comments_key("b"), [])
        await store.put(comments_key("a"), [])
        await store.put(COMMENTS_META_KEY, {})
        await store.put("content/admin.json", {})

        keys = await store.list_keys(COMMENTS_PREFIX)

        assert keys == [
            "content/comments-a.json",
            "content/comments-b.json",
            "content/comments-meta.json",
        ]


class TestFileBlobStore:
    """Tests for the file-system backend."""

    @pytest.mark.asyncio
    async def test_put_writes_json_file(self, tmp_path: Path) -> None:
        store = FileBlobStore(tmp_path)
        await store.put("content/comments-a.json", [{"id": "1"}])

        path = tmp_path / "content" / "comments-a.json"
        assert path.exists()
        assert await store.get("content/comments-a.json") == [{"id": "1"}]

    @pytest.mark.asyncio
    async def test_overwrite_leaves_no_temp_files(self, tmp_path: Path) -> None:
        store = FileBlobStore(tmp_path)
        await store.put("content/x.json", {"v": 1})
        await store.put("content/x.json", {"v": 2})

        assert await store.get("content/x.json") == {"v": 2}
        assert [p.name for p in (tmp_path / "content").iterdir()] == ["x.json"]

    @pytest.mark.asyncio
    async def test_missing_file_is_absent(self, tmp_path: Path) -> None:
        store = FileBlobStore(tmp_path / "does-not-exist")
        assert await store.get("content/x.json") is None
        assert await store.list_keys() == []

    @pytest.mark.asyncio
    async def test_list_keys_relative_posix(self, tmp_path: Path) -> None:
        store = FileBlobStore(tmp_path)
        await store.put(comments_key("first-post"), [])
        await store.put("content/banned-ips.json", [])

        assert await store.list_keys(COMMENTS_PREFIX) == ["content/comments-first-post.json"]

    @pytest.mark.asyncio
    async def test_unreadable_file_raises_unavailable(self, tmp_path: Path) -> None:
        store = FileBlobStore(tmp_path)
        (tmp_path / "content" / "x.json").mkdir(parents=True)

        with pytest.raises(StorageUnavailableError):
            await store.get("content/x.json")

    @pytest.mark.asyncio
    async def test_path_escape_rejected(self, tmp_path: Path) -> None:
        store = FileBlobStore(tmp_path)
        with pytest.raises(InvalidKeyError):
            await store.put("../outside.json", {})


class TestRedisBlobStore:
    """Tests for the Redis backend with a mocked client."""

    @pytest.mark.asyncio
    async def test_get_uses_prefixed_key(self) -> None:
        client = AsyncMock()
        client.get = AsyncMock(return_value='{"a": 1}')
        store = RedisBlobStore(client, key_prefix="blob:")

        assert await store.get("content/x.json") == {"a": 1}
        client.get.assert_awaited_once_with("blob:content/x.json")

    @pytest.mark.asyncio
    async def test_put_sets_encoded_document(self) -> None:
        client = AsyncMock()
        store = RedisBlobStore(client, key_prefix="blob:")

        await store.put("content/x.json", [1])

        key, payload = client.set.await_args.args
        assert key == "blob:content/x.json"
        assert payload.replace(b" ", b"").replace(b"\n", b"") == b"[1]"

    @pytest.mark.asyncio
    async def test_redis_error_raises_unavailable(self) -> None:
        client = AsyncMock()
        client.get = AsyncMock(side_effect=redis.ConnectionError("down"))
        store = RedisBlobStore(client)

        with pytest.raises(StorageUnavailableError):
            await store.get("content/x.json")

    @pytest.mark.asyncio
    async def test_list_keys_strips_prefix(self) -> None:
        async def scan_iter(match: str):
            assert match == "blob:content/comments-*"
            for name in ("blob:content/comments-a.json", "blob:content/comments-meta.json"):
                yield name

        client = AsyncMock()
        client.scan_iter = scan_iter
        store = RedisBlobStore(client, key_prefix="blob:")

        assert await store.list_keys(COMMENTS_PREFIX) == [
            "content/comments-a.json",
            "content/comments-meta.json",
        ]
