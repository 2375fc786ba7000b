"""
Persistence layer for the ontology catalog.

Backends:
- In-memory store (memory.py)
- DuckDB store (duckdb_store.py)

Both implement ``CatalogStore`` (base.py), including category reference
checks and cascade deletion.
"""

from .base import (
    CatalogStore,
    InvalidRecordError,
    StoreError,
    StoreUnavailableError,
)
from .duckdb_store import DuckDBStore
from .memory import MemoryStore
from .seed import seed_demo_catalog

__all__ = [
    "CatalogStore",
    "DuckDBStore",
    "InvalidRecordError",
    "MemoryStore",
    "StoreError",
    "StoreUnavailableError",
    "seed_demo_catalog",
]
