"""
System API routes for the ontology catalog.

This module provides FastAPI routes for health, environment information
and the in-process log of recent server errors.
"""

import platform
import sys
import threading
import traceback
from collections import deque
from datetime import datetime, timezone
from typing import Any, Deque, Dict, Optional

from fastapi import APIRouter, Depends, Response

from storage import CatalogStore

from .dependencies import get_store
from .shared.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)

MAX_ERROR_ENTRIES = 100

_error_log: Deque[Dict[str, Any]] = deque(maxlen=MAX_ERROR_ENTRIES)
_error_lock = threading.Lock()


def log_error(
    endpoint: str,
    message: str,
    level: str = "error",
    details: Optional[str] = None,
    exc: Optional[BaseException] = None,
) -> None:
    """Record a server-side error and write it to the application log."""
    entry = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": level,
        "endpoint": endpoint,
        "message": message,
        "details": details,
        "traceback": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)) if exc else None,
    }
    with _error_lock:
        _error_log.append(entry)
    if exc is not None:
        logger.error("%s failed: %s", endpoint, message, exc_info=exc)
    else:
        logger.error("%s failed: %s", endpoint, message)


def recent_errors() -> list:
    """Most recent errors first."""
    with _error_lock:
        return list(reversed(_error_log))


def clear_errors() -> None:
    with _error_lock:
        _error_log.clear()


def _get_package_versions() -> Dict[str, str]:
    """Get versions of key packages."""
    packages = {}
    for name in ("fastapi", "pydantic", "starlette", "uvicorn", "duckdb", "jinja2", "orjson"):
        try:
            module = __import__(name)
            packages[name] = getattr(module, "__version__", "unknown")
        except ImportError:
            pass
    return packages


@router.get("/health")
async def health_check(store: CatalogStore = Depends(get_store)):
    """Health check endpoint."""
    return {
        "status": "healthy",
        "message": "ontology catalog is running",
        "storage": store.backend,
    }


@router.get("/system/info")
async def system_info():
    """Get system and environment information."""
    return {
        "python": {
            "version": sys.version,
            "platform": sys.platform,
        },
        "system": {
            "os": platform.system(),
            "release": platform.release(),
            "machine": platform.machine(),
        },
        "packages": _get_package_versions(),
    }


@router.get("/system/errors")
async def list_errors():
    """Recent server errors, newest first."""
    errors = recent_errors()
    return {"errors": errors, "total": len(errors)}


@router.delete("/system/errors", status_code=204)
async def delete_errors():
    clear_errors()
    return Response(status_code=204)
