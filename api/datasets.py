"""
Datasets API routes.

A dataset is created from exactly one uploaded ontology file (multipart
field ``file``). Only metadata (name, filename, size label) is stored in
the catalog; the bytes are kept on disk only when an upload directory is
configured.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import FileResponse
from starlette.datastructures import UploadFile

from storage import CatalogStore, InvalidRecordError, StoreUnavailableError

from .app_config import AppSettings
from .dependencies import get_blob_store, get_settings, get_store
from .schemas import Dataset
from .shared.logger import get_logger
from .uploads import (
    UPLOAD_FIELD,
    BlobStore,
    UploadRejected,
    check_content_length,
    format_size,
    read_upload,
    validate_filename,
)

router = APIRouter()
logger = get_logger(__name__)


# ============= Intake =============


async def accept_upload(request: Request, settings: AppSettings) -> tuple[str, bytes]:
    """Parse the multipart body and return ``(filename, content)``.

    Raises:
        UploadRejected: missing file, disallowed extension or oversize.
    """
    check_content_length(request.headers.get("content-length"), settings.max_upload_bytes)
    form = await request.form(max_files=1)
    try:
        upload = form.get(UPLOAD_FIELD)
        if not isinstance(upload, UploadFile):
            raise UploadRejected("No file uploaded")
        filename = validate_filename(upload.filename)
        content = await read_upload(upload, settings.max_upload_bytes)
    finally:
        await form.close()
    return filename, content


async def create_dataset_from_upload(
    category_id: str,
    filename: str,
    content: bytes,
    store: CatalogStore,
    blobs: Optional[BlobStore],
) -> dict:
    """Create the dataset record and, if enabled, persist its bytes.

    If the bytes cannot be written the record is removed again.
    """
    dataset = store.create_dataset({
        "category_id": category_id,
        "name": filename,
        "filename": filename,
        "size": format_size(len(content)),
    })
    if blobs is not None:
        try:
            await blobs.save(dataset["id"], content)
        except BaseException:
            store.delete_dataset(dataset["id"])
            raise
    return dataset


# ============= Routes =============


@router.get("/categories/{category_id}/datasets", response_model=List[Dataset])
async def list_datasets(category_id: str, store: CatalogStore = Depends(get_store)):
    """List datasets attached to a category."""
    try:
        return store.list_datasets(category_id)
    except StoreUnavailableError:
        raise HTTPException(status_code=500, detail="Failed to fetch datasets")


@router.post("/categories/{category_id}/datasets", response_model=Dataset, status_code=201)
async def upload_dataset(
    category_id: str,
    request: Request,
    store: CatalogStore = Depends(get_store),
    settings: AppSettings = Depends(get_settings),
    blobs: Optional[BlobStore] = Depends(get_blob_store),
):
    """Upload one ontology file (.owl, .rdf, .ttl, .json-ld, .jsonld) as a dataset."""
    try:
        filename, content = await accept_upload(request, settings)
    except UploadRejected as e:
        logger.warning("Rejected upload for category %s: %s", category_id, e.message)
        raise HTTPException(status_code=e.status_code, detail=e.message)

    try:
        return await create_dataset_from_upload(category_id, filename, content, store, blobs)
    except InvalidRecordError as e:
        logger.warning("Rejected dataset for category %s: %s", category_id, e)
        raise HTTPException(status_code=400, detail="Failed to upload dataset")


@router.get("/datasets/{dataset_id}", response_model=Dataset)
async def get_dataset(dataset_id: str, store: CatalogStore = Depends(get_store)):
    try:
        dataset = store.get_dataset(dataset_id)
    except StoreUnavailableError:
        raise HTTPException(status_code=500, detail="Failed to fetch dataset")
    if dataset is None:
        raise HTTPException(status_code=404, detail="Dataset not found")
    return dataset


@router.get("/datasets/{dataset_id}/download")
async def download_dataset(
    dataset_id: str,
    store: CatalogStore = Depends(get_store),
    blobs: Optional[BlobStore] = Depends(get_blob_store),
):
    """Return the stored file bytes as an attachment."""
    dataset = store.get_dataset(dataset_id)
    if dataset is None:
        raise HTTPException(status_code=404, detail="Dataset not found")
    if blobs is None or not blobs.exists(dataset_id):
        raise HTTPException(status_code=404, detail="Dataset file not stored")
    return FileResponse(
        str(blobs.path_for(dataset_id)),
        filename=dataset["filename"],
        media_type="application/octet-stream",
    )


@router.delete("/datasets/{dataset_id}", status_code=204)
async def delete_dataset(
    dataset_id: str,
    store: CatalogStore = Depends(get_store),
    blobs: Optional[BlobStore] = Depends(get_blob_store),
):
    try:
        deleted = store.delete_dataset(dataset_id)
    except StoreUnavailableError:
        raise HTTPException(status_code=500, detail="Failed to delete dataset")
    if not deleted:
        raise HTTPException(status_code=404, detail="Dataset not found")
    if blobs is not None:
        blobs.delete(dataset_id)
    return Response(status_code=204)
