"""DuckDB-backed catalog store.

One database file holds the three catalog tables. Every write runs in
its own transaction on a dedicated cursor, so a failed write never
leaves partial rows behind and category deletion removes the category
and its dependents atomically.

DuckDB does not implement ``ON DELETE CASCADE``, and updating a parent
row that is referenced by a foreign key is rejected, so the category
reference is checked here instead of being declared in the schema.
Category name uniqueness is checked the same way: an update touching a
UNIQUE column is executed as delete plus insert and can trip DuckDB's
constraint check even when the name does not change.
"""

from __future__ import annotations

import json
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator

import duckdb

from api.shared.logger import get_logger

from .base import (
    CATEGORY_FIELDS,
    DATASET_FIELDS,
    DEFAULT_SOLUTION_TYPE,
    SOLUTION_FIELDS,
    SOLUTION_REQUIRED,
    CatalogStore,
    InvalidRecordError,
    StoreUnavailableError,
    new_id,
    pick,
    require,
    utcnow,
)

logger = get_logger(__name__)

SCHEMA = [
    "CREATE SEQUENCE IF NOT EXISTS catalog_position_seq",
    """
    CREATE TABLE IF NOT EXISTS categories (
        id VARCHAR PRIMARY KEY,
        position BIGINT NOT NULL DEFAULT nextval('catalog_position_seq'),
        name VARCHAR NOT NULL,
        description VARCHAR NOT NULL,
        icon VARCHAR NOT NULL,
        specification VARCHAR NOT NULL,
        created_at TIMESTAMP NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS datasets (
        id VARCHAR PRIMARY KEY,
        position BIGINT NOT NULL DEFAULT nextval('catalog_position_seq'),
        category_id VARCHAR NOT NULL,
        name VARCHAR NOT NULL,
        filename VARCHAR NOT NULL,
        size VARCHAR NOT NULL,
        uploaded_at TIMESTAMP NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS solutions (
        id VARCHAR PRIMARY KEY,
        position BIGINT NOT NULL DEFAULT nextval('catalog_position_seq'),
        category_id VARCHAR NOT NULL,
        title VARCHAR NOT NULL,
        language VARCHAR NOT NULL,
        code VARCHAR NOT NULL,
        type VARCHAR NOT NULL DEFAULT 'query'
    )
    """,
    "CREATE INDEX IF NOT EXISTS datasets_category_idx ON datasets (category_id)",
    "CREATE INDEX IF NOT EXISTS solutions_category_idx ON solutions (category_id)",
]

_CATEGORY_COLUMNS = "id, name, description, icon, specification, created_at"
_DATASET_COLUMNS = "id, category_id, name, filename, size, uploaded_at"
_SOLUTION_COLUMNS = "id, category_id, title, language, code, type"


def _to_db_timestamp(value: datetime) -> datetime:
    """Store timestamps as naive UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _from_db_timestamp(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    return value.replace(tzinfo=timezone.utc)


class DuckDBStore(CatalogStore):
    """Catalog store persisted in a DuckDB database file.

    Args:
        db_path: Database file, or ``":memory:"`` for a throwaway database.
    """

    backend = "duckdb"

    def __init__(self, db_path: str | Path = ":memory:") -> None:
        self._db_path = str(db_path)
        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        try:
            self._conn = duckdb.connect(self._db_path)
            for statement in SCHEMA:
                self._conn.execute(statement)
        except duckdb.Error as e:
            raise StoreUnavailableError(f"Failed to open catalog database {self._db_path}: {e}") from e
        logger.info("Opened DuckDB catalog at %s", self._db_path)

    @property
    def db_path(self) -> str:
        return self._db_path

    def close(self) -> None:
        self._conn.close()

    # ------------------------------------------------------------------
    # Cursor helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _read(self) -> Iterator[duckdb.DuckDBPyConnection]:
        cur = self._conn.cursor()
        try:
            yield cur
        except duckdb.Error as e:
            raise StoreUnavailableError(f"Catalog read failed: {e}") from e
        finally:
            cur.close()

    @contextmanager
    def _transaction(self, entity: str) -> Iterator[duckdb.DuckDBPyConnection]:
        cur = self._conn.cursor()
        try:
            cur.begin()
            try:
                yield cur
            except BaseException:
                cur.rollback()
                raise
            cur.commit()
        except duckdb.ConstraintException as e:
            raise InvalidRecordError(f"Invalid {entity}: {e}") from e
        except duckdb.Error as e:
            raise StoreUnavailableError(f"Catalog write failed: {e}") from e
        finally:
            cur.close()

    @staticmethod
    def _fetch(cur: duckdb.DuckDBPyConnection, sql: str, params: list[Any] | None = None) -> list[dict[str, Any]]:
        cur.execute(sql, params or [])
        columns = [d[0] for d in cur.description]
        return [dict(zip(columns, row)) for row in cur.fetchall()]

    def _fetch_one(self, cur: duckdb.DuckDBPyConnection, sql: str, params: list[Any]) -> dict[str, Any] | None:
        rows = self._fetch(cur, sql, params)
        return rows[0] if rows else None

    @staticmethod
    def _category_exists(cur: duckdb.DuckDBPyConnection, category_id: str) -> bool:
        cur.execute("SELECT 1 FROM categories WHERE id = $1", [category_id])
        return cur.fetchone() is not None

    # ------------------------------------------------------------------
    # Row conversion
    # ------------------------------------------------------------------

    @staticmethod
    def _category_row(row: dict[str, Any] | None) -> dict[str, Any] | None:
        if row is None:
            return None
        row["specification"] = json.loads(row["specification"])
        row["created_at"] = _from_db_timestamp(row["created_at"])
        return row

    @staticmethod
    def _dataset_row(row: dict[str, Any] | None) -> dict[str, Any] | None:
        if row is None:
            return None
        row["uploaded_at"] = _from_db_timestamp(row["uploaded_at"])
        return row

    # ============= Categories =============

    def list_categories(self) -> list[dict[str, Any]]:
        with self._read() as cur:
            rows = self._fetch(cur, f"SELECT {_CATEGORY_COLUMNS} FROM categories ORDER BY position")
        return [self._category_row(r) for r in rows]

    def get_category(self, category_id: str) -> dict[str, Any] | None:
        with self._read() as cur:
            row = self._fetch_one(cur, f"SELECT {_CATEGORY_COLUMNS} FROM categories WHERE id = $1", [category_id])
        return self._category_row(row)

    def create_category(self, fields: dict[str, Any]) -> dict[str, Any]:
        values = pick(fields, CATEGORY_FIELDS)
        require(values, CATEGORY_FIELDS, "category")
        category_id = new_id()
        created_at = fields.get("created_at") or utcnow()
        with self._transaction("category") as cur:
            cur.execute("SELECT 1 FROM categories WHERE name = $1", [values["name"]])
            if cur.fetchone() is not None:
                raise InvalidRecordError(f"Category name '{values['name']}' already exists")
            cur.execute(
                "INSERT INTO categories (id, name, description, icon, specification, created_at) "
                "VALUES ($1, $2, $3, $4, $5, $6)",
                [
                    category_id,
                    values["name"],
                    values["description"],
                    values["icon"],
                    json.dumps(values["specification"]),
                    _to_db_timestamp(created_at),
                ],
            )
        logger.info("Created category %s (%s)", category_id, values["name"])
        return self.get_category(category_id)

    def update_category(self, category_id: str, fields: dict[str, Any]) -> dict[str, Any] | None:
        values = pick(fields, CATEGORY_FIELDS)
        if "specification" in values:
            values["specification"] = json.dumps(values["specification"])
        with self._transaction("category") as cur:
            if not self._category_exists(cur, category_id):
                return None
            if "name" in values:
                cur.execute(
                    "SELECT 1 FROM categories WHERE name = $1 AND id <> $2",
                    [values["name"], category_id],
                )
                if cur.fetchone() is not None:
                    raise InvalidRecordError(f"Category name '{values['name']}' already exists")
            self._apply_update(cur, "categories", category_id, values)
        logger.info("Updated category %s", category_id)
        return self.get_category(category_id)

    def delete_category(self, category_id: str) -> bool:
        with self._transaction("category") as cur:
            if not self._category_exists(cur, category_id):
                return False
            cur.execute("DELETE FROM datasets WHERE category_id = $1", [category_id])
            cur.execute("DELETE FROM solutions WHERE category_id = $1", [category_id])
            cur.execute("DELETE FROM categories WHERE id = $1", [category_id])
        logger.info("Deleted category %s with its datasets and solutions", category_id)
        return True

    # ============= Datasets =============

    def list_datasets(self, category_id: str | None = None) -> list[dict[str, Any]]:
        sql = f"SELECT {_DATASET_COLUMNS} FROM datasets"
        params: list[Any] = []
        if category_id is not None:
            sql += " WHERE category_id = $1"
            params.append(category_id)
        with self._read() as cur:
            rows = self._fetch(cur, sql + " ORDER BY position", params)
        return [self._dataset_row(r) for r in rows]

    def get_dataset(self, dataset_id: str) -> dict[str, Any] | None:
        with self._read() as cur:
            row = self._fetch_one(cur, f"SELECT {_DATASET_COLUMNS} FROM datasets WHERE id = $1", [dataset_id])
        return self._dataset_row(row)

    def create_dataset(self, fields: dict[str, Any]) -> dict[str, Any]:
        values = pick(fields, DATASET_FIELDS)
        require(values, DATASET_FIELDS, "dataset")
        dataset_id = new_id()
        uploaded_at = fields.get("uploaded_at") or utcnow()
        with self._transaction("dataset") as cur:
            if not self._category_exists(cur, values["category_id"]):
                raise InvalidRecordError(f"Category '{values['category_id']}' does not exist")
            cur.execute(
                "INSERT INTO datasets (id, category_id, name, filename, size, uploaded_at) "
                "VALUES ($1, $2, $3, $4, $5, $6)",
                [
                    dataset_id,
                    values["category_id"],
                    values["name"],
                    values["filename"],
                    values["size"],
                    _to_db_timestamp(uploaded_at),
                ],
            )
        logger.info("Created dataset %s in category %s", dataset_id, values["category_id"])
        return self.get_dataset(dataset_id)

    def delete_dataset(self, dataset_id: str) -> bool:
        with self._transaction("dataset") as cur:
            cur.execute("DELETE FROM datasets WHERE id = $1 RETURNING id", [dataset_id])
            removed = cur.fetchone() is not None
        if removed:
            logger.info("Deleted dataset %s", dataset_id)
        return removed

    # ============= Solutions =============

    def list_solutions(self, category_id: str | None = None) -> list[dict[str, Any]]:
        sql = f"SELECT {_SOLUTION_COLUMNS} FROM solutions"
        params: list[Any] = []
        if category_id is not None:
            sql += " WHERE category_id = $1"
            params.append(category_id)
        with self._read() as cur:
            return self._fetch(cur, sql + " ORDER BY position", params)

    def get_solution(self, solution_id: str) -> dict[str, Any] | None:
        with self._read() as cur:
            return self._fetch_one(cur, f"SELECT {_SOLUTION_COLUMNS} FROM solutions WHERE id = $1", [solution_id])

    def create_solution(self, fields: dict[str, Any]) -> dict[str, Any]:
        values = pick(fields, SOLUTION_FIELDS)
        values.setdefault("type", DEFAULT_SOLUTION_TYPE)
        require(values, SOLUTION_REQUIRED, "solution")
        solution_id = new_id()
        with self._transaction("solution") as cur:
            if not self._category_exists(cur, values["category_id"]):
                raise InvalidRecordError(f"Category '{values['category_id']}' does not exist")
            cur.execute(
                "INSERT INTO solutions (id, category_id, title, language, code, type) "
                "VALUES ($1, $2, $3, $4, $5, $6)",
                [
                    solution_id,
                    values["category_id"],
                    values["title"],
                    values["language"],
                    values["code"],
                    values["type"],
                ],
            )
        logger.info("Created solution %s in category %s", solution_id, values["category_id"])
        return self.get_solution(solution_id)

    def update_solution(self, solution_id: str, fields: dict[str, Any]) -> dict[str, Any] | None:
        values = pick(fields, SOLUTION_FIELDS)
        with self._transaction("solution") as cur:
            cur.execute("SELECT 1 FROM solutions WHERE id = $1", [solution_id])
            if cur.fetchone() is None:
                return None
            if "category_id" in values and not self._category_exists(cur, values["category_id"]):
                raise InvalidRecordError(f"Category '{values['category_id']}' does not exist")
            self._apply_update(cur, "solutions", solution_id, values)
        logger.info("Updated solution %s", solution_id)
        return self.get_solution(solution_id)

    def delete_solution(self, solution_id: str) -> bool:
        with self._transaction("solution") as cur:
            cur.execute("DELETE FROM solutions WHERE id = $1 RETURNING id", [solution_id])
            removed = cur.fetchone() is not None
        if removed:
            logger.info("Deleted solution %s", solution_id)
        return removed

    @staticmethod
    def _apply_update(cur: duckdb.DuckDBPyConnection, table: str, record_id: str, values: dict[str, Any]) -> None:
        if not values:
            return
        # Column names come from the *_FIELDS whitelists, never from input keys
        assignments = ", ".join(f"{column} = ${i}" for i, column in enumerate(values, start=2))
        cur.execute(
            f"UPDATE {table} SET {assignments} WHERE id = $1",
            [record_id, *values.values()],
        )
