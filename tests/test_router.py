"""
Tests for the FastAPI binding.
"""

import pytest
from fastapi.testclient import TestClient

from endor.actions import MICROSERVICE_HEADER
from endor.app import create_app


@pytest.fixture
def client(registry):
    app = create_app(registry, configure_logs=False)
    with TestClient(app) as client:
        yield client


class TestActionRoutes:
    """Tests for POST /api/{app}/{version}/{resource}/{action}."""

    def test_create_and_list(self, client):
        created = client.post("/api/acme/v1/customers/create", json={"data": {"name": "Ada"}})

        assert created.status_code == 200
        assert created.headers[MICROSERVICE_HEADER] == "customers-service"
        assert created.json()["data"]["name"] == "Ada"

        listed = client.post("/api/acme/v1/customers/list", json={})

        assert [c["name"] for c in listed.json()["data"]] == ["Ada"]

    def test_category_action_path(self, client):
        response = client.post(
            "/api/acme/v1/customers/cat-1/create",
            json={"data": {"name": "Bob", "vatNumber": "IT1"}},
        )

        assert response.status_code == 200
        assert response.json()["data"]["category"] == "cat-1"

    def test_validation_error_envelope(self, client):
        response = client.post("/api/acme/v1/customers/cat-1/create", json={"data": {"name": "Bob"}})

        assert response.status_code == 400
        assert response.json() == {
            "messages": [{"gravity": "Fatal", "value": "data: 'vatNumber' is a required property"}],
            "data": None,
            "schema": None,
        }

    def test_invalid_json(self, client):
        response = client.post(
            "/api/acme/v1/customers/create",
            content=b"{not json",
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["messages"][0]["gravity"] == "Fatal"

    def test_no_body(self, client):
        response = client.post("/api/acme/v1/customers/schema")

        assert response.status_code == 200
        assert "properties" in response.json()["schema"]

    @pytest.mark.parametrize(
        "path",
        ["/api/acme/v2/customers/list", "/api/acme/v1/orders/list", "/api/acme/v1/customers/archive"],
    )
    def test_unknown_targets(self, client, path):
        assert client.post(path, json={}).status_code == 404


class TestDocumentRoutes:
    """Tests for the documentation and service endpoints."""

    def test_openapi(self, client):
        document = client.get("/openapi.json").json()

        assert document["servers"] == [{"url": "http://testserver/"}]
        assert "/api/{app}/v1/customers/cat-1/list" in document["paths"]

    def test_resources(self, client):
        catalog = client.get("/resources").json()

        assert [r["id"] for r in catalog] == ["customers"]

    def test_root_and_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}
        assert client.get("/").json()["resources"] == ["customers"]

    def test_registry_frozen_on_startup(self, client, registry):
        assert registry.frozen
