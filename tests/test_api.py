"""
API Endpoint Tests
==================
Tests for the FastAPI routes using an isolated in-memory session store.
"""

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_session_service
from api.main import app
from api.services.session_service import SessionService
from api.storage import InMemorySessionStore
from fieldmap.config import get_config


@pytest.fixture
def client():
    """Test client with a fresh session store per test."""
    service = SessionService(store=InMemorySessionStore(max_sessions=10))
    app.dependency_overrides[get_session_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def session_id(client, sales_csv):
    response = client.post("/api/v1/datasets/upload", files={"file": ("sales.csv", sales_csv, "text/csv")})
    assert response.status_code == 201
    return response.json()["session_id"]


class TestHealthEndpoints:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_root(self, client):
        assert client.get("/").json()["docs"] == "/docs"


class TestCatalogEndpoints:
    def test_list_fields(self, client, catalog):
        response = client.get("/api/v1/catalog")
        assert response.status_code == 200
        assert len(response.json()) == len(catalog)

    def test_filter_by_category(self, client):
        fields = client.get("/api/v1/catalog", params={"category": "marketing"}).json()
        assert fields
        assert {f["category"] for f in fields} == {"marketing"}

    def test_categories(self, client):
        categories = client.get("/api/v1/catalog/categories").json()
        assert categories[0] == {"category": "financial", "field_count": categories[0]["field_count"]}

    def test_get_field(self, client):
        response = client.get("/api/v1/catalog/revenue")
        assert response.status_code == 200
        assert response.json()["expected_type"] == "currency"

    def test_unknown_field(self, client):
        response = client.get("/api/v1/catalog/not_a_field")
        assert response.status_code == 404
        assert response.json()["error_type"] == "UnknownFieldError"


class TestDatasetEndpoints:
    def test_upload_returns_mappings_and_metrics(self, client, sales_csv):
        response = client.post("/api/v1/datasets/upload", files={"file": ("sales.csv", sales_csv, "text/csv")})
        assert response.status_code == 201
        data = response.json()
        assert data["dataset"]["row_count"] == 5
        assert data["dataset"]["mapped_count"] == 9
        assert data["metrics"]["total_revenue"] == pytest.approx(575.75)
        assert len(data["mappings"]) == 9

    def test_create_from_json(self, client, sales_rows, sales_columns):
        response = client.post(
            "/api/v1/datasets",
            json={"file_name": "sales.json", "rows": sales_rows, "columns": sales_columns},
        )
        assert response.status_code == 201
        assert response.json()["metrics"]["total_transactions"] == 5

    def test_unsupported_file_type(self, client):
        response = client.post("/api/v1/datasets/upload", files={"file": ("report.pdf", b"%PDF", "application/pdf")})
        assert response.status_code == 415
        assert response.json()["error_type"] == "UnsupportedFileTypeError"

    def test_upload_too_large(self, client, sales_csv, monkeypatch):
        monkeypatch.setattr(get_config(), "max_upload_mb", 0.00001)
        response = client.post("/api/v1/datasets/upload", files={"file": ("sales.csv", sales_csv, "text/csv")})
        assert response.status_code == 413

    def test_get_and_list(self, client, session_id):
        assert client.get(f"/api/v1/datasets/{session_id}").json()["file_name"] == "sales.csv"
        assert [d["session_id"] for d in client.get("/api/v1/datasets").json()] == [session_id]

    def test_delete(self, client, session_id):
        assert client.delete(f"/api/v1/datasets/{session_id}").json()["deleted"] is True
        response = client.get(f"/api/v1/datasets/{session_id}")
        assert response.status_code == 404
        assert response.json()["error_type"] == "SessionNotFoundError"


class TestMappingEndpoints:
    def test_get_mappings_with_candidates(self, client, session_id):
        response = client.get(f"/api/v1/datasets/{session_id}/mappings", params={"include_candidates": True})
        mappings = response.json()["mappings"]
        amount = next(m for m in mappings if m["source_column"] == "Total Amount")
        assert amount["business_field"] == "total_amount"
        assert amount["candidates"][0]["field_id"] == "total_amount"

    def test_override_updates_metrics(self, client, session_id):
        response = client.put(f"/api/v1/datasets/{session_id}/mappings/Total Amount", json={"field_id": None})
        assert response.status_code == 200
        amount = next(m for m in response.json()["mappings"] if m["source_column"] == "Total Amount")
        assert amount["mapped"] is False
        assert amount["overridden"] is True

        metrics = client.get(f"/api/v1/datasets/{session_id}/metrics").json()["metrics"]
        assert metrics["total_revenue"] == 0.0

    def test_override_unknown_column(self, client, session_id):
        response = client.put(f"/api/v1/datasets/{session_id}/mappings/Nope", json={"field_id": "revenue"})
        assert response.status_code == 404
        assert response.json()["error_type"] == "UnknownColumnError"

    def test_override_unknown_field(self, client, session_id):
        response = client.put(f"/api/v1/datasets/{session_id}/mappings/Quantity", json={"field_id": "nope"})
        assert response.status_code == 404


class TestMetricsEndpoints:
    def test_metrics(self, client, session_id):
        metrics = client.get(f"/api/v1/datasets/{session_id}/metrics").json()["metrics"]
        assert metrics["total_transactions"] == 5
        assert metrics["diagnostics"]["total_skipped"] == 1

    def test_field_values(self, client, session_id):
        data = client.get(f"/api/v1/datasets/{session_id}/fields/total_amount/values").json()
        assert data["source_column"] == "Total Amount"
        assert data["values"] == [100.0, 250.5, 150.0, 75.25]
        assert data["skipped"] == 1

    def test_date_values_serialized(self, client, session_id):
        data = client.get(f"/api/v1/datasets/{session_id}/fields/order_date/values").json()
        assert data["values"][0] == "2024-01-05"

    def test_unmapped_field_values(self, client, session_id):
        data = client.get(f"/api/v1/datasets/{session_id}/fields/ad_spend/values").json()
        assert data["values"] == []

    def test_unknown_session(self, client):
        assert client.get("/api/v1/datasets/missing/metrics").status_code == 404
