"""
Tests for the category endpoints (/api/categories).
"""

from factories import make_category_payload, make_solution_payload, owl_upload


class TestCategoryCrud:
    """Create, read, update and delete through the REST API."""

    def test_list_empty(self, client):
        response = client.get("/api/categories")
        assert response.status_code == 200
        assert response.json() == []

    def test_create_returns_camel_case_record(self, client):
        payload = make_category_payload()
        response = client.post("/api/categories", json=payload)

        assert response.status_code == 201
        data = response.json()
        assert data["id"]
        assert data["createdAt"]
        assert data["name"] == payload["name"]
        assert data["specification"] == payload["specification"]
        assert "created_at" not in data

    def test_create_then_get(self, client):
        created = client.post("/api/categories", json=make_category_payload()).json()

        response = client.get(f"/api/categories/{created['id']}")

        assert response.status_code == 200
        assert response.json() == created

    def test_list_in_creation_order(self, client):
        for name in ("B", "A", "C"):
            client.post("/api/categories", json=make_category_payload(name))

        names = [c["name"] for c in client.get("/api/categories").json()]
        assert names == ["B", "A", "C"]

    def test_get_unknown_is_404(self, client):
        response = client.get("/api/categories/does-not-exist")
        assert response.status_code == 404
        assert response.json() == {"message": "Category not found"}

    def test_unknown_request_fields_ignored(self, client):
        payload = make_category_payload(id="client-chosen", createdAt="2000-01-01T00:00:00Z", extra=1)
        data = client.post("/api/categories", json=payload).json()

        assert data["id"] != "client-chosen"
        assert not data["createdAt"].startswith("2000")
        assert "extra" not in data


class TestCategoryValidation:

    def test_missing_field_is_400(self, client):
        payload = make_category_payload()
        del payload["description"]

        response = client.post("/api/categories", json=payload)

        assert response.status_code == 400
        assert response.json() == {"message": "Invalid category data"}

    def test_empty_name_is_400(self, client):
        response = client.post("/api/categories", json=make_category_payload(""))
        assert response.status_code == 400

    def test_specification_sequences_required(self, client):
        payload = make_category_payload()
        del payload["specification"]["coreConcepts"]

        response = client.post("/api/categories", json=payload)

        assert response.status_code == 400
        assert client.get("/api/categories").json() == []

    def test_specification_null_sequence_rejected(self, client):
        payload = make_category_payload()
        payload["specification"]["properties"] = None
        assert client.post("/api/categories", json=payload).status_code == 400

    def test_duplicate_name_is_400(self, client):
        client.post("/api/categories", json=make_category_payload("Dup"))
        response = client.post("/api/categories", json=make_category_payload("Dup"))

        assert response.status_code == 400
        assert response.json() == {"message": "Invalid category data"}
        assert len(client.get("/api/categories").json()) == 1

    def test_malformed_json_is_400(self, client):
        response = client.post(
            "/api/categories",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400


class TestCategoryUpdate:

    def test_partial_update_changes_only_given_field(self, client, category):
        response = client.put(f"/api/categories/{category['id']}", json={"description": "Updated"})

        assert response.status_code == 200
        data = response.json()
        assert data["description"] == "Updated"
        assert data["name"] == category["name"]
        assert data["icon"] == category["icon"]
        assert data["specification"] == category["specification"]
        assert data["createdAt"] == category["createdAt"]

    def test_update_specification(self, client, category):
        spec = {"definition": "Changed", "coreConcepts": ["X"], "properties": ["p"]}
        data = client.put(f"/api/categories/{category['id']}", json={"specification": spec}).json()
        assert data["specification"] == spec

    def test_update_unknown_is_404_and_creates_nothing(self, client):
        response = client.put("/api/categories/nope", json={"name": "Ghost"})

        assert response.status_code == 404
        assert client.get("/api/categories").json() == []

    def test_update_to_taken_name_is_400(self, client, category):
        other = client.post("/api/categories", json=make_category_payload("Other")).json()

        response = client.put(f"/api/categories/{other['id']}", json={"name": category["name"]})

        assert response.status_code == 400
        assert client.get(f"/api/categories/{other['id']}").json()["name"] == "Other"

    def test_update_partial_specification_is_400(self, client, category):
        response = client.put(
            f"/api/categories/{category['id']}",
            json={"specification": {"definition": "only this"}},
        )
        assert response.status_code == 400


class TestCategoryDelete:

    def test_delete_then_404(self, client, category):
        first = client.delete(f"/api/categories/{category['id']}")
        second = client.delete(f"/api/categories/{category['id']}")

        assert first.status_code == 204
        assert first.content == b""
        assert second.status_code == 404
        assert client.get("/api/categories").json() == []

    def test_delete_cascades_to_datasets_and_solutions(self, client, category):
        cid = category["id"]
        dataset = client.post(f"/api/categories/{cid}/datasets", files=owl_upload()).json()
        solution = client.post(f"/api/categories/{cid}/solutions", json=make_solution_payload()).json()

        assert client.delete(f"/api/categories/{cid}").status_code == 204

        assert client.get(f"/api/datasets/{dataset['id']}").status_code == 404
        assert client.get(f"/api/solutions/{solution['id']}").status_code == 404
        assert client.get(f"/api/categories/{cid}/datasets").json() == []
        assert client.get(f"/api/categories/{cid}/solutions").json() == []
