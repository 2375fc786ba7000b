"""
Category API routes.

Categories own datasets and solutions; deleting a category removes them
as well (the store cascades, the stored dataset bytes are removed here).
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response

from storage import CatalogStore, InvalidRecordError, StoreUnavailableError

from .dependencies import get_blob_store, get_store
from .schemas import Category, CategoryCreate, CategoryUpdate, specification_to_record
from .shared.logger import get_logger
from .uploads import BlobStore

router = APIRouter()
logger = get_logger(__name__)


def category_fields(body: CategoryCreate | CategoryUpdate) -> dict:
    """Convert a request body into store fields (only what the client sent)."""
    fields = body.model_dump(exclude_unset=True, exclude_none=True, exclude={"specification"})
    if body.specification is not None:
        fields["specification"] = specification_to_record(body.specification)
    return fields


@router.get("/categories", response_model=List[Category])
async def list_categories(store: CatalogStore = Depends(get_store)):
    """List all categories in insertion order."""
    try:
        return store.list_categories()
    except StoreUnavailableError:
        raise HTTPException(status_code=500, detail="Failed to fetch categories")


@router.get("/categories/{category_id}", response_model=Category)
async def get_category(category_id: str, store: CatalogStore = Depends(get_store)):
    try:
        category = store.get_category(category_id)
    except StoreUnavailableError:
        raise HTTPException(status_code=500, detail="Failed to fetch category")
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


@router.post("/categories", response_model=Category, status_code=201)
async def create_category(body: CategoryCreate, store: CatalogStore = Depends(get_store)):
    try:
        return store.create_category(category_fields(body))
    except InvalidRecordError as e:
        logger.warning("Rejected category: %s", e)
        raise HTTPException(status_code=400, detail="Invalid category data")


@router.put("/categories/{category_id}", response_model=Category)
async def update_category(category_id: str, body: CategoryUpdate, store: CatalogStore = Depends(get_store)):
    """Partially update a category; omitted fields keep their values."""
    try:
        category = store.update_category(category_id, category_fields(body))
    except InvalidRecordError as e:
        logger.warning("Rejected category update %s: %s", category_id, e)
        raise HTTPException(status_code=400, detail="Invalid category data")
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


@router.delete("/categories/{category_id}", status_code=204)
async def delete_category(
    category_id: str,
    store: CatalogStore = Depends(get_store),
    blobs: Optional[BlobStore] = Depends(get_blob_store),
):
    try:
        dataset_ids = [d["id"] for d in store.list_datasets(category_id)] if blobs else []
        deleted = store.delete_category(category_id)
    except StoreUnavailableError:
        raise HTTPException(status_code=500, detail="Failed to delete category")
    if not deleted:
        raise HTTPException(status_code=404, detail="Category not found")
    for dataset_id in dataset_ids:
        blobs.delete(dataset_id)
    return Response(status_code=204)
