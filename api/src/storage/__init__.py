"""Storage module: JSON blob store backends and document keys."""

from src.storage.dependencies import BlobStoreDep, get_blob_store
from src.storage.keys import (
    ADMIN_CONFIG_KEY,
    BANNED_IPS_KEY,
    COMMENTS_META_KEY,
    COMMENTS_PREFIX,
    comments_key,
    slug_from_comments_key,
)
from src.storage.service import (
    BlobStore,
    FileBlobStore,
    InvalidKeyError,
    MemoryBlobStore,
    RedisBlobStore,
    StorageError,
    StorageUnavailableError,
    create_blob_store,
)


__all__ = [
    "ADMIN_CONFIG_KEY",
    "BANNED_IPS_KEY",
    "COMMENTS_META_KEY",
    "COMMENTS_PREFIX",
    "BlobStore",
    "BlobStoreDep",
    "FileBlobStore",
    "InvalidKeyError",
    "MemoryBlobStore",
    "RedisBlobStore",
    "StorageError",
    "StorageUnavailableError",
    "comments_key",
    "create_blob_store",
    "get_blob_store",
    "slug_from_comments_key",
]
