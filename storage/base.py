"""Persistence contract shared by every catalog backend.

A store holds three collections (categories, datasets, solutions).
Datasets and solutions are scoped by ``category_id``; the store itself
enforces the category reference on create and cascades category
deletion, so the in-memory and DuckDB backends behave identically.

Records are plain dicts keyed by snake_case field names::

    category: id, name, description, icon, specification, created_at
    dataset:  id, category_id, name, filename, size, uploaded_at
    solution: id, category_id, title, language, code, type

"Not found" is never raised: ``get_*``/``update_*`` return ``None`` and
``delete_*`` returns ``False``.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

CATEGORY_FIELDS = ("name", "description", "icon", "specification")
DATASET_FIELDS = ("category_id", "name", "filename", "size")
SOLUTION_FIELDS = ("category_id", "title", "language", "code", "type")
SOLUTION_REQUIRED = ("category_id", "title", "language", "code")

DEFAULT_SOLUTION_TYPE = "query"


class StoreError(Exception):
    """Base class for persistence errors."""


class InvalidRecordError(StoreError):
    """A write violated a constraint (duplicate name, missing category)."""


class StoreUnavailableError(StoreError):
    """The backing store failed for reasons unrelated to the input."""


def new_id() -> str:
    """Return a fresh 128-bit random identifier."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def pick(fields: dict[str, Any], allowed: tuple[str, ...]) -> dict[str, Any]:
    """Keep only ``allowed`` keys whose value is not ``None``."""
    return {k: v for k, v in fields.items() if k in allowed and v is not None}


def require(values: dict[str, Any], required: tuple[str, ...], entity: str) -> None:
    """Raise ``InvalidRecordError`` if any of ``required`` is missing."""
    missing = [name for name in required if name not in values]
    if missing:
        raise InvalidRecordError(f"Invalid {entity}: missing {', '.join(missing)}")


class CatalogStore(ABC):
    """Abstract catalog store.

    Implementations must keep list results in insertion order and must
    never leave a partially written record behind.
    """

    backend: str = "abstract"

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    @abstractmethod
    def list_categories(self) -> list[dict[str, Any]]:
        ...

    @abstractmethod
    def get_category(self, category_id: str) -> dict[str, Any] | None:
        ...

    @abstractmethod
    def create_category(self, fields: dict[str, Any]) -> dict[str, Any]:
        ...

    @abstractmethod
    def update_category(self, category_id: str, fields: dict[str, Any]) -> dict[str, Any] | None:
        ...

    @abstractmethod
    def delete_category(self, category_id: str) -> bool:
        """Delete a category together with its datasets and solutions."""

    # ------------------------------------------------------------------
    # Datasets
    # ------------------------------------------------------------------

    @abstractmethod
    def list_datasets(self, category_id: str | None = None) -> list[dict[str, Any]]:
        ...

    @abstractmethod
    def get_dataset(self, dataset_id: str) -> dict[str, Any] | None:
        ...

    @abstractmethod
    def create_dataset(self, fields: dict[str, Any]) -> dict[str, Any]:
        ...

    @abstractmethod
    def delete_dataset(self, dataset_id: str) -> bool:
        ...

    # ------------------------------------------------------------------
    # Solutions
    # ------------------------------------------------------------------

    @abstractmethod
    def list_solutions(self, category_id: str | None = None) -> list[dict[str, Any]]:
        ...

    @abstractmethod
    def get_solution(self, solution_id: str) -> dict[str, Any] | None:
        ...

    @abstractmethod
    def create_solution(self, fields: dict[str, Any]) -> dict[str, Any]:
        ...

    @abstractmethod
    def update_solution(self, solution_id: str, fields: dict[str, Any]) -> dict[str, Any] | None:
        ...

    @abstractmethod
    def delete_solution(self, solution_id: str) -> bool:
        ...

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Release backend resources. No-op by default."""

    def __enter__(self) -> "CatalogStore":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
