"""In-memory catalog store backed by insertion-ordered dicts."""

from __future__ import annotations

import copy
import threading
from typing import Any

from api.shared.logger import get_logger

from .base import (
    CATEGORY_FIELDS,
    DATASET_FIELDS,
    DEFAULT_SOLUTION_TYPE,
    SOLUTION_FIELDS,
    SOLUTION_REQUIRED,
    CatalogStore,
    InvalidRecordError,
    new_id,
    pick,
    require,
    utcnow,
)

logger = get_logger(__name__)


class MemoryStore(CatalogStore):
    """Process-local store. Contents are lost when the instance is dropped."""

    backend = "memory"

    def __init__(self) -> None:
        self._categories: dict[str, dict[str, Any]] = {}
        self._datasets: dict[str, dict[str, Any]] = {}
        self._solutions: dict[str, dict[str, Any]] = {}
        # Guards multi-step writes (uniqueness checks, cascade delete)
        self._lock = threading.RLock()

    @staticmethod
    def _copy(record: dict[str, Any] | None) -> dict[str, Any] | None:
        return copy.deepcopy(record) if record is not None else None

    def _unique_id(self, table: dict[str, dict[str, Any]]) -> str:
        record_id = new_id()
        while record_id in table:
            record_id = new_id()
        return record_id

    def _check_name_free(self, name: str, exclude_id: str | None = None) -> None:
        for record in self._categories.values():
            if record["name"] == name and record["id"] != exclude_id:
                raise InvalidRecordError(f"Category name '{name}' already exists")

    def _check_category_exists(self, category_id: str) -> None:
        if category_id not in self._categories:
            raise InvalidRecordError(f"Category '{category_id}' does not exist")

    # ============= Categories =============

    def list_categories(self) -> list[dict[str, Any]]:
        return [self._copy(c) for c in self._categories.values()]

    def get_category(self, category_id: str) -> dict[str, Any] | None:
        return self._copy(self._categories.get(category_id))

    def create_category(self, fields: dict[str, Any]) -> dict[str, Any]:
        values = pick(fields, CATEGORY_FIELDS)
        require(values, CATEGORY_FIELDS, "category")
        with self._lock:
            self._check_name_free(values["name"])
            record = {
                "id": self._unique_id(self._categories),
                **copy.deepcopy(values),
                "created_at": fields.get("created_at") or utcnow(),
            }
            self._categories[record["id"]] = record
        logger.info("Created category %s (%s)", record["id"], record.get("name"))
        return self._copy(record)

    def update_category(self, category_id: str, fields: dict[str, Any]) -> dict[str, Any] | None:
        values = pick(fields, CATEGORY_FIELDS)
        with self._lock:
            existing = self._categories.get(category_id)
            if existing is None:
                return None
            if "name" in values:
                self._check_name_free(values["name"], exclude_id=category_id)
            updated = {**existing, **copy.deepcopy(values)}
            self._categories[category_id] = updated
        logger.info("Updated category %s", category_id)
        return self._copy(updated)

    def delete_category(self, category_id: str) -> bool:
        with self._lock:
            if self._categories.pop(category_id, None) is None:
                return False
            orphan_datasets = [d for d, r in self._datasets.items() if r["category_id"] == category_id]
            orphan_solutions = [s for s, r in self._solutions.items() if r["category_id"] == category_id]
            for dataset_id in orphan_datasets:
                del self._datasets[dataset_id]
            for solution_id in orphan_solutions:
                del self._solutions[solution_id]
        logger.info(
            "Deleted category %s (cascade: %d datasets, %d solutions)",
            category_id, len(orphan_datasets), len(orphan_solutions),
        )
        return True

    # ============= Datasets =============

    def list_datasets(self, category_id: str | None = None) -> list[dict[str, Any]]:
        return [
            self._copy(d) for d in self._datasets.values()
            if category_id is None or d["category_id"] == category_id
        ]

    def get_dataset(self, dataset_id: str) -> dict[str, Any] | None:
        return self._copy(self._datasets.get(dataset_id))

    def create_dataset(self, fields: dict[str, Any]) -> dict[str, Any]:
        values = pick(fields, DATASET_FIELDS)
        require(values, DATASET_FIELDS, "dataset")
        with self._lock:
            self._check_category_exists(values["category_id"])
            record = {
                "id": self._unique_id(self._datasets),
                **values,
                "uploaded_at": fields.get("uploaded_at") or utcnow(),
            }
            self._datasets[record["id"]] = record
        logger.info("Created dataset %s in category %s", record["id"], record["category_id"])
        return self._copy(record)

    def delete_dataset(self, dataset_id: str) -> bool:
        with self._lock:
            removed = self._datasets.pop(dataset_id, None) is not None
        if removed:
            logger.info("Deleted dataset %s", dataset_id)
        return removed

    # ============= Solutions =============

    def list_solutions(self, category_id: str | None = None) -> list[dict[str, Any]]:
        return [
            self._copy(s) for s in self._solutions.values()
            if category_id is None or s["category_id"] == category_id
        ]

    def get_solution(self, solution_id: str) -> dict[str, Any] | None:
        return self._copy(self._solutions.get(solution_id))

    def create_solution(self, fields: dict[str, Any]) -> dict[str, Any]:
        values = pick(fields, SOLUTION_FIELDS)
        values.setdefault("type", DEFAULT_SOLUTION_TYPE)
        require(values, SOLUTION_REQUIRED, "solution")
        with self._lock:
            self._check_category_exists(values["category_id"])
            record = {"id": self._unique_id(self._solutions), **values}
            self._solutions[record["id"]] = record
        logger.info("Created solution %s in category %s", record["id"], record["category_id"])
        return self._copy(record)

    def update_solution(self, solution_id: str, fields: dict[str, Any]) -> dict[str, Any] | None:
        values = pick(fields, SOLUTION_FIELDS)
        with self._lock:
            existing = self._solutions.get(solution_id)
            if existing is None:
                return None
            if "category_id" in values:
                self._check_category_exists(values["category_id"])
            updated = {**existing, **values}
            self._solutions[solution_id] = updated
        logger.info("Updated solution %s", solution_id)
        return self._copy(updated)

    def delete_solution(self, solution_id: str) -> bool:
        with self._lock:
            removed = self._solutions.pop(solution_id, None) is not None
        if removed:
            logger.info("Deleted solution %s", solution_id)
        return removed
