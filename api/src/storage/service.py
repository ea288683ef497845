"""JSON blob store backends.

Every persistent document (comment collections, comments metadata, ban list,
admin config) lives under one string key as one JSON document. Backends:

- ``MemoryBlobStore``: process-local dict (tests, ephemeral deployments)
- ``FileBlobStore``: one file per key under a directory, atomic replace on write
- ``RedisBlobStore``: one string value per key in a shared Redis

Single-key writes are atomic. There are no cross-key transactions and no
compare-and-swap; concurrent read-modify-write on one key is last-write-wins.
"""

import asyncio
import os
import re
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import orjson
import redis.asyncio as redis
import structlog

from src.config.settings import Settings
from src.core.errors import AppError


logger = structlog.get_logger(__name__)


class StorageError(AppError):
    """Base error for storage operations (rendered as 500)."""

    def __init__(self, message: str, code: str = "storage_error") -> None:
        super().__init__(message, code)


class StorageUnavailableError(StorageError):
    """The backend could not be read or written."""

    def __init__(self, message: str = "Storage is unavailable") -> None:
        super().__init__(message, "storage_unavailable")


class InvalidKeyError(StorageError):
    """Key would escape the store namespace or contains unsupported characters."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Invalid storage key: {key!r}", "invalid_key")


# ==============================================================================
# Key validation
# ==============================================================================

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_-][A-Za-z0-9._/-]*$")


def validate_key(key: str) -> str:
    """Reject keys that are empty, absolute or contain ``..`` segments."""
    if not key or not _KEY_PATTERN.fullmatch(key):
        raise InvalidKeyError(key)
    if any(part in ("", ".", "..") for part in key.split("/")):
        raise InvalidKeyError(key)
    return key


# ==============================================================================
# Base
# ==============================================================================


class BlobStore(ABC):
    """Key to JSON document store.

    ``get`` returns ``None`` for an absent document. A document that does not
    decode, or decodes to the wrong top-level type, is treated as absent.
    Backend failures raise ``StorageUnavailableError``.
    """

    backend_name = "base"

    async def get(self, key: str, expected_type: type | None = None) -> Any | None:
        """Read and decode one document.

        Args:
            key: Storage key
            expected_type: If given, documents of another top-level type are
                treated as absent (e.g. ``list`` for comment collections)

        Returns:
            Decoded document, or None
        """
        raw = await self._read(validate_key(key))
        if raw is None:
            return None

        try:
            document = orjson.loads(raw)
        except orjson.JSONDecodeError:
            logger.warning("blob_malformed", key=key, backend=self.backend_name)
            return None

        if expected_type is not None and not isinstance(document, expected_type):
            logger.warning(
                "blob_unexpected_type",
                key=key,
                expected=expected_type.__name__,
                actual=type(document).__name__,
            )
            return None

        return document

    async def put(self, key: str, document: Any) -> None:
        """Encode and write one document atomically."""
        payload = orjson.dumps(document, option=orjson.OPT_INDENT_2)
        await self._write(validate_key(key), payload)

    async def list_keys(self, prefix: str = "") -> list[str]:
        """List stored keys starting with ``prefix``, sorted."""
        return sorted(await self._list(prefix))

    async def close(self) -> None:  # noqa: B027
        """Release backend resources."""

    @abstractmethod
    async def _read(self, key: str) -> bytes | None: ...

    @abstractmethod
    async def _write(self, key: str, payload: bytes) -> None: ...

    @abstractmethod
    async def _list(self, prefix: str) -> list[str]: ...


# ==============================================================================
# Backends
# ==============================================================================


class MemoryBlobStore(BlobStore):
    """Blob store kept in a process-local dict of encoded documents."""

    backend_name = "memory"

    def __init__(self) -> None:
        self._blobs: dict[str, bytes] = {}

    async def _read(self, key: str) -> bytes | None:
        return self._blobs.get(key)

    async def _write(self, key: str, payload: bytes) -> None:
        self._blobs[key] = payload

    async def _list(self, prefix: str) -> list[str]:
        return [key for key in self._blobs if key.startswith(prefix)]


class FileBlobStore(BlobStore):
    """Blob store backed by a directory; key ``a/b.json`` maps to ``<root>/a/b.json``.

    Writes go to a temporary file in the target directory followed by
    ``os.replace`` so readers never observe a partially written document.
    """

    backend_name = "file"

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).resolve()

    def _path_for(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if not path.is_relative_to(self.root):
            raise InvalidKeyError(key)
        return path

    async def _read(self, key: str) -> bytes | None:
        path = self._path_for(key)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error("blob_read_failed", key=key, error=str(e))
            raise StorageUnavailableError(f"Failed to read {key}") from e

    async def _write(self, key: str, payload: bytes) -> None:
        path = self._path_for(key)
        try:
            await asyncio.to_thread(self._write_atomic, path, payload)
        except OSError as e:
            logger.error("blob_write_failed", key=key, error=str(e))
            raise StorageUnavailableError(f"Failed to write {key}") from e

    @staticmethod
    def _write_atomic(path: Path, payload: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as tmp:
                tmp.write(payload)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    async def _list(self, prefix: str) -> list[str]:
        try:
            return await asyncio.to_thread(self._scan, prefix)
        except OSError as e:
            logger.error("blob_list_failed", prefix=prefix, error=str(e))
            raise StorageUnavailableError("Failed to list documents") from e

    def _scan(self, prefix: str) -> list[str]:
        if not self.root.exists():
            return []
        keys = []
        for path in self.root.rglob("*"):
            if not path.is_file() or path.name.startswith("."):
                continue
            key = path.relative_to(self.root).as_posix()
            if key.startswith(prefix):
                keys.append(key)
        return keys


_REDIS_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


class RedisBlobStore(BlobStore):
    """Blob store holding each document as a Redis string under ``key_prefix + key``."""

    backend_name = "redis"

    def __init__(self, client: redis.Redis, key_prefix: str = "blob:") -> None:
        self.client = client
        self.key_prefix = key_prefix

    async def _read(self, key: str) -> bytes | None:
        try:
            value = await self.client.get(self.key_prefix + key)
        except redis.RedisError as e:
            logger.error("blob_read_failed", key=key, error=str(e))
            raise StorageUnavailableError(f"Failed to read {key}") from e

        if value is None:
            return None
        return value.encode() if isinstance(value, str) else value

    async def _write(self, key: str, payload: bytes) -> None:
        try:
            await self.client.set(self.key_prefix + key, payload)
        except redis.RedisError as e:
            logger.error("blob_write_failed", key=key, error=str(e))
            raise StorageUnavailableError(f"Failed to write {key}") from e

    async def _list(self, prefix: str) -> list[str]:
        pattern = _REDIS_GLOB_SPECIAL.sub(r"\\\1", self.key_prefix + prefix) + "*"
        try:
            return [
                (name.decode() if isinstance(name, bytes) else name)[len(self.key_prefix) :]
                async for name in self.client.scan_iter(match=pattern)
            ]
        except redis.RedisError as e:
            logger.error("blob_list_failed", prefix=prefix, error=str(e))
            raise StorageUnavailableError("Failed to list documents") from e


def create_blob_store(settings: Settings, redis_client: redis.Redis | None = None) -> BlobStore:
    """Build the blob store selected by ``settings.storage_backend``."""
    if settings.storage_backend == "memory":
        store: BlobStore = MemoryBlobStore()
    elif settings.storage_backend == "redis":
        if redis_client is None:
            msg = "Redis blob store requires a Redis connection"
            raise StorageUnavailableError(msg)
        store = RedisBlobStore(redis_client, key_prefix=settings.storage_key_prefix)
    else:
        store = FileBlobStore(settings.storage_dir)

    logger.info("blob_store_initialized", backend=store.backend_name)
    return store
