"""
Root conftest.py for ontology catalog tests.

This file contains shared fixtures and pytest configuration
that applies to all test modules.
"""

import sys
from pathlib import Path

import pytest

# Ensure the project root is in the path
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from api.app_config import AppSettings  # noqa: E402
from api.system import clear_errors  # noqa: E402
from factories import make_category_payload  # noqa: E402
from storage import DuckDBStore, MemoryStore  # noqa: E402


# ============================================================================
# Pytest Hooks
# ============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "slow: mark test as slow running",
    )


def pytest_collection_modifyitems(config, items):
    """Tests in the integration/ directory are marked 'slow'."""
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.slow)


# ============================================================================
# Shared Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def _reset_error_log():
    clear_errors()
    yield
    clear_errors()


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def duckdb_store(tmp_path):
    store = DuckDBStore(tmp_path / "catalog.duckdb")
    yield store
    store.close()


@pytest.fixture(params=["memory", "duckdb"])
def store(request, tmp_path):
    """Every catalog backend, for contract tests."""
    if request.param == "memory":
        yield MemoryStore()
    else:
        store = DuckDBStore(tmp_path / "catalog.duckdb")
        yield store
        store.close()


@pytest.fixture
def settings(tmp_path):
    return AppSettings(
        storage="memory",
        db_path=str(tmp_path / "catalog.duckdb"),
        seed_demo_data=False,
    )


@pytest.fixture
def client(settings, memory_store):
    """TestClient over a fresh, empty in-memory catalog."""
    from fastapi.testclient import TestClient
    from main import create_app

    with TestClient(create_app(settings, memory_store)) as c:
        yield c


@pytest.fixture
def category(client):
    """A category created through the API."""
    response = client.post("/api/categories", json=make_category_payload())
    assert response.status_code == 201
    return response.json()
