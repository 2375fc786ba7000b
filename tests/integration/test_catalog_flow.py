"""
End-to-end catalog session against a DuckDB-backed application.

A researcher opens the seeded catalog, adds a category, attaches a file
and a solution, reads everything back through both the API and the UI,
restarts the server, then removes the category again.
"""

from fastapi.testclient import TestClient

from main import create_app

from factories import make_category_payload, make_solution_payload


class TestCatalogSession:

    def test_seeded_catalog_is_served(self, app_client):
        health = app_client.get("/api/health").json()
        categories = app_client.get("/api/categories").json()

        assert health["storage"] == "duckdb"
        assert [c["name"] for c in categories] == ["Screen Description", "Robot Meet World"]
        screen_datasets = app_client.get(f"/api/categories/{categories[0]['id']}/datasets").json()
        assert [d["size"] for d in screen_datasets] == ["2.4 MB", "1.8 MB"]

    def test_full_curation_flow(self, app_client, duckdb_settings):
        # Create
        category = app_client.post(
            "/api/categories", json=make_category_payload("Household Objects")
        ).json()
        cid = category["id"]

        content = b"@prefix ex: <http://example.org/> .\nex:Cup a ex:Container ."
        dataset = app_client.post(
            f"/api/categories/{cid}/datasets",
            files={"file": ("household.ttl", content, "text/turtle")},
        ).json()
        solution = app_client.post(
            f"/api/categories/{cid}/solutions",
            json=make_solution_payload("Container Query", code="SELECT ?c WHERE { ?c a ex:Container }"),
        ).json()

        # Read back through the API and the UI
        assert app_client.get(f"/api/datasets/{dataset['id']}/download").content == content
        page = app_client.get(f"/categories/{cid}").text
        assert "household.ttl" in page
        assert '<span class="hl-variable">?c</span>' in page

        # Update
        app_client.put(f"/api/categories/{cid}", json={"description": "Things found at home"})
        app_client.put(f"/api/solutions/{solution['id']}", json={"type": "implementation"})
        assert app_client.get(f"/api/categories/{cid}").json()["description"] == "Things found at home"

        # Survives a restart
        with TestClient(create_app(duckdb_settings)) as restarted:
            names = [c["name"] for c in restarted.get("/api/categories").json()]
            assert names == ["Screen Description", "Robot Meet World", "Household Objects"]
            assert restarted.get(f"/api/solutions/{solution['id']}").json()["type"] == "implementation"

    def test_category_removal_cascades_everywhere(self, app_client):
        robot = app_client.get("/api/categories").json()[1]
        datasets = app_client.get(f"/api/categories/{robot['id']}/datasets").json()
        solutions = app_client.get(f"/api/categories/{robot['id']}/solutions").json()
        assert datasets and solutions

        assert app_client.delete(f"/api/categories/{robot['id']}").status_code == 204

        for dataset in datasets:
            assert app_client.get(f"/api/datasets/{dataset['id']}").status_code == 404
        for solution in solutions:
            assert app_client.get(f"/api/solutions/{solution['id']}").status_code == 404
        assert app_client.get(f"/categories/{robot['id']}").status_code == 404
        assert [c["name"] for c in app_client.get("/api/categories").json()] == ["Screen Description"]
