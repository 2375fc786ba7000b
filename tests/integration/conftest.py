"""
Integration test fixtures for the ontology catalog.

Provides fixtures for:
- Settings pointing at a temporary DuckDB file and upload directory
- A test client over the fully assembled application (store built from settings)
"""

from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from api.app_config import AppSettings
from main import create_app

# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def duckdb_settings(tmp_path: Path) -> AppSettings:
    """Durable settings: DuckDB catalog plus on-disk dataset bytes."""
    return AppSettings(
        storage="duckdb",
        db_path=str(tmp_path / "data" / "catalog.duckdb"),
        upload_dir=str(tmp_path / "uploads"),
        seed_demo_data=True,
    )


@pytest.fixture
def app_client(duckdb_settings: AppSettings) -> Generator[TestClient, None, None]:
    """Client over an application that builds and seeds its own store."""
    with TestClient(create_app(duckdb_settings)) as c:
        yield c
