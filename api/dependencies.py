"""Request-scoped accessors for the objects created by ``create_app``."""

from __future__ import annotations

from typing import Optional

from fastapi import Request

from storage import CatalogStore

from .app_config import AppSettings
from .uploads import BlobStore


def get_store(request: Request) -> CatalogStore:
    return request.app.state.store


def get_settings(request: Request) -> AppSettings:
    return request.app.state.settings


def get_blob_store(request: Request) -> Optional[BlobStore]:
    """Blob storage, or ``None`` when only dataset metadata is kept."""
    return request.app.state.blob_store
