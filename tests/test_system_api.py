"""
Tests for health, system info and the recent-errors log, plus the
application factory's store selection.
"""

from fastapi.testclient import TestClient

from api.app_config import AppSettings
from api.system import log_error, recent_errors
from main import build_store, create_app
from storage import DuckDBStore, MemoryStore, StoreUnavailableError


class FailingStore(MemoryStore):
    """Memory store whose reads fail as if the database were gone."""

    def list_categories(self):
        raise StoreUnavailableError("database is locked")

    def get_solution(self, solution_id):
        raise StoreUnavailableError("database is locked")


class TestHealth:

    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json() == {
            "status": "healthy",
            "message": "ontology catalog is running",
            "storage": "memory",
        }

    def test_system_info(self, client):
        data = client.get("/api/system/info").json()
        assert data["python"]["version"]
        assert "fastapi" in data["packages"]


class TestErrorLog:

    def test_log_error_newest_first(self):
        log_error("/a", "first")
        log_error("/b", "second", level="warning")

        errors = recent_errors()
        assert [e["message"] for e in errors] == ["second", "first"]
        assert errors[0]["level"] == "warning"
        assert errors[1]["traceback"] is None

    def test_store_failure_is_500_and_logged(self, settings):
        with TestClient(create_app(settings, FailingStore())) as c:
            response = c.get("/api/categories")
            errors = c.get("/api/system/errors").json()

        assert response.status_code == 500
        assert response.json() == {"message": "Failed to fetch categories"}
        assert errors["total"] == 1
        assert errors["errors"][0]["endpoint"] == "/api/categories"

    def test_store_failure_message_does_not_leak(self, settings):
        with TestClient(create_app(settings, FailingStore())) as c:
            response = c.get("/api/solutions/any")

        assert response.status_code == 500
        assert "locked" not in response.text

    def test_clear_errors(self, client):
        log_error("/x", "boom")

        assert client.delete("/api/system/errors").status_code == 204
        assert client.get("/api/system/errors").json() == {"errors": [], "total": 0}


class TestAppFactory:

    def test_build_store_selects_backend(self, tmp_path):
        assert isinstance(build_store(AppSettings(storage="memory")), MemoryStore)

        store = build_store(AppSettings(storage="duckdb", db_path=str(tmp_path / "c.duckdb")))
        try:
            assert isinstance(store, DuckDBStore)
        finally:
            store.close()

    def test_seeds_demo_catalog_when_enabled(self, tmp_path):
        settings = AppSettings(storage="memory", db_path=str(tmp_path / "c.duckdb"), seed_demo_data=True)

        with TestClient(create_app(settings)) as c:
            names = [cat["name"] for cat in c.get("/api/categories").json()]

        assert names == ["Screen Description", "Robot Meet World"]

    def test_injected_store_is_not_seeded(self, client):
        assert client.get("/api/categories").json() == []

    def test_duckdb_app_persists_between_instances(self, tmp_path):
        settings = AppSettings(storage="duckdb", db_path=str(tmp_path / "c.duckdb"), seed_demo_data=False)
        payload = {
            "name": "Persisted",
            "description": "d",
            "icon": "fas fa-database",
            "specification": {"definition": "x", "coreConcepts": [], "properties": []},
        }

        with TestClient(create_app(settings)) as c:
            assert c.post("/api/categories", json=payload).status_code == 201

        with TestClient(create_app(settings)) as c:
            assert [cat["name"] for cat in c.get("/api/categories").json()] == ["Persisted"]
