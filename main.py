"""
FastAPI backend for the ontology catalog.

This module assembles the web application: the REST API over the catalog
store (categories, datasets, solutions), the server-rendered catalog UI,
and the error handlers that map domain failures to HTTP responses.

The store is created once per application by ``create_app`` and handed
to request handlers through ``app.state``; tests build isolated apps with
their own store.
"""

import argparse
import os
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, ORJSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.app_config import AppSettings, load_settings
from api.categories import router as categories_router
from api.datasets import router as datasets_router
from api.shared.logger import get_logger, setup_logging
from api.solutions import router as solutions_router
from api.system import log_error
from api.system import router as system_router
from api.uploads import BlobStore
from storage import CatalogStore, DuckDBStore, MemoryStore, StoreUnavailableError, seed_demo_catalog
from ui import router as ui_router

logger = get_logger(__name__)

UI_STATIC_DIR = Path(__file__).parent / "ui" / "static"


def build_store(settings: AppSettings) -> CatalogStore:
    """Create the catalog store selected by ``settings.storage``."""
    if settings.storage == "duckdb":
        return DuckDBStore(settings.db_path)
    return MemoryStore()


def _validation_message(path: str) -> str:
    if "/solutions" in path:
        return "Invalid solution data"
    if "/categories" in path:
        return "Invalid category data"
    return "Invalid request data"


def register_exception_handlers(app: FastAPI) -> None:
    """Map errors to ``{"message": ...}`` JSON bodies."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Log HTTP exceptions and return JSON response."""
        # Only log 5xx errors (server errors)
        if exc.status_code >= 500:
            log_error(
                endpoint=str(request.url.path),
                message=str(exc.detail),
                level="error",
                details=f"Status code: {exc.status_code}",
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Request bodies that do not match the insertable shape are a 400."""
        logger.warning("Invalid request body for %s: %s", request.url.path, exc.errors())
        return JSONResponse(
            status_code=400,
            content={"message": _validation_message(request.url.path)},
        )

    @app.exception_handler(StoreUnavailableError)
    async def store_exception_handler(request: Request, exc: StoreUnavailableError):
        log_error(
            endpoint=str(request.url.path),
            message=str(exc),
            level="error",
            details="Catalog store unavailable",
            exc=exc,
        )
        return JSONResponse(status_code=500, content={"message": "Internal server error"})

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Log unexpected exceptions and return JSON response."""
        log_error(
            endpoint=str(request.url.path),
            message=str(exc),
            level="critical",
            details=f"Unhandled exception: {type(exc).__name__}",
            exc=exc,
        )
        return JSONResponse(status_code=500, content={"message": "Internal server error"})


def create_app(settings: Optional[AppSettings] = None, store: Optional[CatalogStore] = None) -> FastAPI:
    """Build the catalog application.

    Args:
        settings: Resolved settings; loaded from the environment if omitted.
        store: Catalog store to serve; built from ``settings`` if omitted.
            A store passed in is used as-is and is not seeded.
    """
    settings = settings or load_settings()
    setup_logging(settings.log_level)

    if store is None:
        store = build_store(settings)
        if settings.seed_demo_data:
            seed_demo_catalog(store)

    app = FastAPI(
        title="Ontology Catalog API",
        description="Catalog of ontology categories with specifications, datasets and example solutions",
        version="1.0.0",
        default_response_class=ORJSONResponse,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.blob_store = BlobStore(settings.upload_dir) if settings.upload_dir else None

    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,  # Must be False when using allow_origins=["*"]
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(categories_router, prefix="/api", tags=["categories"])
    app.include_router(datasets_router, prefix="/api", tags=["datasets"])
    app.include_router(solutions_router, prefix="/api", tags=["solutions"])
    app.include_router(system_router, prefix="/api", tags=["system"])
    app.include_router(ui_router, include_in_schema=False)
    app.mount("/static", StaticFiles(directory=str(UI_STATIC_DIR)), name="static")

    @app.on_event("shutdown")
    async def shutdown_event():
        store.close()

    logger.info(
        "Ontology catalog ready (storage=%s%s, blob storage=%s)",
        store.backend,
        f", db={settings.db_path}" if store.backend == "duckdb" else "",
        settings.upload_dir or "disabled",
    )
    return app


app = create_app()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Ontology catalog server")
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.environ.get("ONTOLOGY_CATALOG_PORT", 8000)),
        help="Port to run the server on (default: 8000 or ONTOLOGY_CATALOG_PORT env var)",
    )
    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--reload",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Enable auto-reload",
    )
    args = parser.parse_args()

    uvicorn.run(
        "main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="info",
    )
