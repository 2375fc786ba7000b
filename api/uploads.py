"""
File intake for dataset uploads.

Validates a single uploaded ontology file (extension allow-list and size
ceiling), derives the human-readable size label stored on the dataset,
and optionally keeps the file bytes on disk.
"""

from __future__ import annotations

import os
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Optional

import aiofiles
from starlette.datastructures import UploadFile

from .shared.logger import get_logger

logger = get_logger(__name__)

UPLOAD_FIELD = "file"
ALLOWED_EXTENSIONS = (".owl", ".rdf", ".ttl", ".json-ld", ".jsonld")
CHUNK_SIZE = 1024 * 1024
BYTES_PER_MB = Decimal(1024 * 1024)

# Multipart framing (boundaries, part headers) on top of the file bytes
MULTIPART_OVERHEAD_BYTES = 64 * 1024

INVALID_TYPE_MESSAGE = "Invalid file type. Only OWL, RDF, TTL, and JSON-LD files are allowed."


class UploadRejected(Exception):
    """An upload failed validation. ``message`` is safe to return to clients."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def file_extension(filename: str) -> str:
    """Return the lower-cased extension including the dot, or ``""``."""
    name = filename.lower()
    dot = name.rfind(".")
    return name[dot:] if dot >= 0 else ""


def validate_filename(filename: Optional[str]) -> str:
    if not filename:
        raise UploadRejected("No file uploaded")
    if file_extension(filename) not in ALLOWED_EXTENSIONS:
        raise UploadRejected(INVALID_TYPE_MESSAGE)
    return filename


def format_size(num_bytes: int) -> str:
    """Format a byte count as megabytes with one decimal, e.g. ``"2.4 MB"``."""
    # Exact quarter-MiB sizes are ties; they round up ("0.3 MB" for 256 KiB)
    megabytes = (Decimal(num_bytes) / BYTES_PER_MB).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return f"{megabytes} MB"


def check_content_length(content_length: Optional[str], max_bytes: int) -> None:
    """Reject a request whose declared body size cannot fit under the limit.

    Runs before the multipart body is read so oversized uploads are never
    buffered.
    """
    if content_length is None:
        return
    try:
        declared = int(content_length)
    except ValueError:
        raise UploadRejected("Invalid Content-Length header")
    if declared > max_bytes + MULTIPART_OVERHEAD_BYTES:
        raise UploadRejected(_too_large_message(max_bytes))


async def read_upload(upload: UploadFile, max_bytes: int) -> bytes:
    """Read ``upload`` fully, stopping as soon as it exceeds ``max_bytes``."""
    chunks = []
    total = 0
    while True:
        chunk = await upload.read(CHUNK_SIZE)
        if not chunk:
            break
        total += len(chunk)
        if total > max_bytes:
            raise UploadRejected(_too_large_message(max_bytes))
        chunks.append(chunk)
    return b"".join(chunks)


def _too_large_message(max_bytes: int) -> str:
    return f"File too large. Maximum size is {format_size(max_bytes)}."


class BlobStore:
    """Stores uploaded dataset bytes as ``<root>/<dataset id>``.

    Files are written to a temporary name and renamed into place, so a
    failed or interrupted write never leaves a partial blob.
    """

    def __init__(self, root: str | Path):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def path_for(self, dataset_id: str) -> Path:
        # Dataset ids are server-generated UUIDs; reject anything path-like
        if not dataset_id or "/" in dataset_id or "\\" in dataset_id or dataset_id.startswith("."):
            raise ValueError(f"Invalid dataset id: {dataset_id!r}")
        return self.root / dataset_id

    def exists(self, dataset_id: str) -> bool:
        try:
            return self.path_for(dataset_id).is_file()
        except ValueError:
            return False

    async def save(self, dataset_id: str, data: bytes) -> Path:
        target = self.path_for(dataset_id)
        partial = target.with_name(f".{target.name}.part")
        try:
            async with aiofiles.open(partial, "wb") as f:
                await f.write(data)
            os.replace(partial, target)
        except BaseException:
            partial.unlink(missing_ok=True)
            raise
        logger.info("Stored %d bytes for dataset %s", len(data), dataset_id)
        return target

    def delete(self, dataset_id: str) -> bool:
        try:
            path = self.path_for(dataset_id)
        except ValueError:
            return False
        if path.exists():
            path.unlink()
            logger.info("Removed stored bytes for dataset %s", dataset_id)
            return True
        return False
