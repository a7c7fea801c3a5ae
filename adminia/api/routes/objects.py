"""Receiving side of signed uploads and object downloads."""

from collections.abc import Iterator
from typing import BinaryIO

from fastapi import APIRouter, Depends, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse

from adminia.api import schemas
from adminia.api.dependencies import get_storage
from adminia.storage.base import BaseObjectStorage
from adminia.storage.paths import UPLOADS_DIR, canonical_path

router = APIRouter()

_CHUNK_SIZE = 64 * 1024


@router.put("/uploads/{object_id}", response_model=schemas.ObjectPathResponse)
async def upload_object(
    object_id: str,
    request: Request,
    expires: str = Query(...),
    signature: str = Query(...),
    storage: BaseObjectStorage = Depends(get_storage),
) -> schemas.ObjectPathResponse:
    """Store the body of a PUT to a signed upload URL. Each URL accepts one upload."""
    key = f"{UPLOADS_DIR}/{object_id}"
    storage.verify_upload(key, expires, signature)
    body = await request.body()
    object_path = await run_in_threadpool(storage.write_object, key, [body])
    return schemas.ObjectPathResponse(object_path=object_path)


@router.get("/{object_key:path}")
def download_object(
    object_key: str,
    storage: BaseObjectStorage = Depends(get_storage),
) -> StreamingResponse:
    stream = storage.open_read_stream(canonical_path(object_key))
    return StreamingResponse(_iter_chunks(stream), media_type="application/octet-stream")


def _iter_chunks(stream: BinaryIO) -> Iterator[bytes]:
    with stream:
        while chunk := stream.read(_CHUNK_SIZE):
            yield chunk
