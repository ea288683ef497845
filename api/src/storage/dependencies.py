"""Dependencies for storage module."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from src.storage.service import BlobStore


async def get_blob_store(request: Request) -> BlobStore:
    """Get the blob store from app state.

    Args:
        request: FastAPI request

    Returns:
        BlobStore instance
    """
    store = getattr(request.app.state, "blob_store", None)
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Storage not available",
        )
    return store


BlobStoreDep = Annotated[BlobStore, Depends(get_blob_store)]
