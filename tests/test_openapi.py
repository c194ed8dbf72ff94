"""
Tests for OpenAPI document assembly.
"""

import json
from dataclasses import dataclass
from typing import Annotated
from unittest.mock import AsyncMock

import pytest
from pydantic import BaseModel

from endor.actions import new_action
from endor.errors import SchemaConflictError
from endor.openapi import (
    DEFAULT_RESPONSE,
    OPENAPI_VERSION,
    SECURITY_SCHEME,
    OpenAPIAssembler,
    build_openapi_document,
)
from endor.schema import SchemaTag
from endor.service import EndorService


def _filter_v1():
    class Filter(BaseModel):
        name: str

    return Filter


@dataclass
class Address:
    street: str
    city: str


@dataclass
class Shipment:
    billing: Annotated[Address, SchemaTag(title="Billing address")]
    shipping: Address


def _filter_v2():
    class Filter(BaseModel):
        limit: int

    return Filter


class TestOpenAPIDocument:
    """Tests for the document built from a registry."""

    @pytest.fixture
    def document(self, registry):
        registry.register(
            EndorService(
                "health",
                "Health checks",
                methods={"ping": new_action(AsyncMock(), "Ping", public=True)},
            )
        )
        return registry.openapi(host="https://api.example.com")

    def test_header(self, document):
        assert document["openapi"] == OPENAPI_VERSION
        assert document["info"]["title"] == "customers-service"
        assert document["servers"] == [{"url": "https://api.example.com"}]
        assert document["x-endor-resources"] == {"customers": "Customers", "health": "Health checks"}

    def test_one_path_per_action(self, document):
        paths = document["paths"]

        assert len(paths) == 13
        assert "/api/{app}/v1/customers/list" in paths
        assert "/api/{app}/v1/customers/cat-1/create" in paths
        assert "/api/{app}/v1/health/ping" in paths

    def test_operation(self, document):
        operation = document["paths"]["/api/{app}/v1/customers/cat-1/list"]["post"]

        assert operation["operationId"] == "customers - cat-1/list"
        assert operation["tags"] == ["customers"]
        assert operation["parameters"][0]["name"] == "app"
        assert operation["responses"]["default"]["content"]["application/json"]["schema"] == {
            "$ref": f"#/components/schemas/{DEFAULT_RESPONSE}"
        }

    def test_schema_action_has_no_body(self, document):
        assert "requestBody" not in document["paths"]["/api/{app}/v1/customers/schema"]["post"]

    def test_shared_type_is_one_component(self, document):
        components = document["components"]["schemas"]
        text = json.dumps(document["paths"])

        assert set(components["ReadInstanceDTO"]["properties"]) == {"id"}
        assert text.count('"#/components/schemas/ReadInstanceDTO"') == 4
        assert text.count('"#/components/schemas/ReadDTO"') == 2

    def test_composite_body_is_inline(self, document):
        body = document["paths"]["/api/{app}/v1/customers/cat-1/create"]["post"]["requestBody"]
        schema = body["content"]["application/json"]["schema"]

        assert schema["required"] == ["data"]
        assert "vatNumber" in schema["properties"]["data"]["properties"]

    def test_security(self, document):
        assert document["security"] == [{SECURITY_SCHEME: []}]
        assert document["components"]["securitySchemes"][SECURITY_SCHEME] == {
            "type": "apiKey",
            "in": "cookie",
            "name": "sessionId",
        }
        assert document["paths"]["/api/{app}/v1/health/ping"]["post"]["security"] == []
        assert "security" not in document["paths"]["/api/{app}/v1/customers/list"]["post"]

    def test_document_is_json_serializable(self, document):
        assert json.loads(json.dumps(document)) == document


class TestOpenAPIAssembler:
    """Tests for OpenAPIAssembler edge cases."""

    def test_conflicting_shapes(self):
        services = [
            EndorService("a", methods={"find": new_action(AsyncMock(), "Find", payload_type=_filter_v1())}),
            EndorService("b", methods={"find": new_action(AsyncMock(), "Find", payload_type=_filter_v2())}),
        ]

        with pytest.raises(SchemaConflictError):
            build_openapi_document("svc", "/", services)

    def test_identical_shapes_are_shared(self):
        services = [
            EndorService("a", methods={"find": new_action(AsyncMock(), "Find", payload_type=_filter_v1())}),
            EndorService("b", methods={"find": new_action(AsyncMock(), "Find", payload_type=_filter_v1())}),
        ]

        document = build_openapi_document("svc", "/", services)

        assert "Filter" in document["components"]["schemas"]

    def test_service_version_in_path(self):
        service = EndorService("a", version="v2", methods={"ping": new_action(AsyncMock(), "Ping")})

        document = build_openapi_document("svc", "/", [service])

        assert list(document["paths"]) == ["/api/{app}/v2/a/ping"]

    def test_prefix_requires_app(self):
        with pytest.raises(ValueError):
            OpenAPIAssembler("svc", path_prefix="/api/{version}")

    def test_custom_description(self):
        document = OpenAPIAssembler("svc", description="Customer APIs").build([])

        assert document["info"]["description"] == "Customer APIs"
        assert document["paths"] == {}

    def test_tagged_field_of_shared_type(self):
        service = EndorService(
            "shipments",
            methods={"create": new_action(AsyncMock(), "Create a shipment", payload_type=Shipment)},
        )

        document = build_openapi_document("svc", "/", [service])

        components = document["components"]["schemas"]
        assert components["Address"]["properties"] == {
            "street": {"type": "string"},
            "city": {"type": "string"},
        }
        assert "title" not in components["Address"]
        shipment = components["Shipment"]["properties"]
        assert shipment["shipping"] == {"$ref": "#/components/schemas/Address"}
        assert shipment["billing"]["title"] == "Billing address"
        assert shipment["billing"]["properties"] == components["Address"]["properties"]
