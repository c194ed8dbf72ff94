"""
OpenAPI document assembly.

Walks registered services and produces an OpenAPI 3.1.0 document with one
POST operation per service action. Object schemas derived from named
types are emitted once under ``components/schemas`` and referenced with
``$ref`` wherever they appear again; two different shapes under the same
name are a registration error.

Example:
    document = build_openapi_document(
        "customers-service",
        "https://api.example.com",
        registry.services,
    )
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from endor.actions import MessageGravity
from endor.errors import SchemaConflictError
from endor.schema import Schema, SchemaType

if TYPE_CHECKING:
    from endor.actions import EndorServiceAction
    from endor.service import EndorService

logger = logging.getLogger(__name__)

OPENAPI_VERSION = "3.1.0"
DEFAULT_PATH_PREFIX = "/api/{app}/{version}"
SECURITY_SCHEME = "cookieAuth"
DEFAULT_RESPONSE = "DefaultEndorResponse"


def component_ref(name: str) -> dict[str, str]:
    return {"$ref": f"#/components/schemas/{name}"}


def _default_response_schema() -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            "messages": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "gravity": {"type": "string", "enum": [g.value for g in MessageGravity]},
                        "value": {"type": "string"},
                    },
                },
            },
            "data": {},
            "schema": {"type": "object"},
        },
    }


class OpenAPIAssembler:
    """
    Builds OpenAPI documents from services.

    Args:
        title: Document title (usually the microservice id)
        host: Server URL
        path_prefix: Path template containing ``{app}``; ``{version}`` is
            replaced with each service's version
        description: Document description (defaults to ``"<title> docs"``)
        version: Document version
        cookie_name: Name of the session cookie
    """

    def __init__(
        self,
        title: str,
        host: str = "/",
        *,
        path_prefix: str = DEFAULT_PATH_PREFIX,
        description: str | None = None,
        version: str = "1.0.0",
        cookie_name: str = "sessionId",
    ):
        if "{app}" not in path_prefix:
            raise ValueError(f"Path prefix must contain an {{app}} variable: {path_prefix}")
        self.title = title
        self.host = host
        self.path_prefix = path_prefix.rstrip("/")
        self.description = description or f"{title} docs"
        self.version = version
        self.cookie_name = cookie_name
        self._components: dict[str, dict[str, Any]] = {}

    def build(self, services: Iterable[EndorService]) -> dict[str, Any]:
        """
        Raises:
            SchemaConflictError: Two different shapes share one type name.
        """
        services = list(services)
        self._components = {DEFAULT_RESPONSE: _default_response_schema()}

        paths: dict[str, Any] = {}
        for service in services:
            prefix = self.path_prefix.replace("{version}", service.version)
            for key in sorted(service.methods):
                path = f"{prefix}/{service.resource}/{key}"
                paths[path] = {"post": self._operation(service.resource, key, service.methods[key])}

        logger.debug(
            f"Assembled OpenAPI document: {len(paths)} paths, {len(self._components)} components"
        )
        return {
            "openapi": OPENAPI_VERSION,
            "info": {
                "title": self.title,
                "description": self.description,
                "version": self.version,
            },
            "servers": [{"url": self.host}],
            "x-endor-resources": {s.resource: s.description for s in services},
            "security": [{SECURITY_SCHEME: []}],
            "paths": paths,
            "components": {
                "schemas": dict(sorted(self._components.items())),
                "securitySchemes": {
                    SECURITY_SCHEME: {
                        "type": "apiKey",
                        "in": "cookie",
                        "name": self.cookie_name,
                    }
                },
            },
        }

    def _operation(self, resource: str, key: str, action: EndorServiceAction) -> dict[str, Any]:
        operation: dict[str, Any] = {
            "operationId": f"{resource} - {key}",
            "summary": action.description,
            "tags": [resource],
            "parameters": [
                {
                    "name": "app",
                    "in": "path",
                    "required": True,
                    "schema": {"type": "string"},
                }
            ],
            "responses": {
                "default": {
                    "description": "Endor response envelope",
                    "content": {"application/json": {"schema": component_ref(DEFAULT_RESPONSE)}},
                }
            },
        }
        if action.input_schema is not None:
            operation["requestBody"] = {
                "required": True,
                "content": {"application/json": {"schema": self._emit(action.input_schema)}},
            }
        if action.options.public:
            operation["security"] = []
        return operation

    def _emit(self, schema: Schema) -> dict[str, Any]:
        if schema.name is None or schema.type != SchemaType.OBJECT:
            return schema.to_dict(self._emit)

        body = schema.to_dict(self._emit)
        existing = self._components.get(schema.name)
        if existing is None:
            self._components[schema.name] = body
        elif existing != body:
            raise SchemaConflictError(schema.name)
        return component_ref(schema.name)


def build_openapi_document(
    title: str,
    host: str,
    services: Iterable[EndorService],
    path_prefix: str = DEFAULT_PATH_PREFIX,
    **kwargs: Any,
) -> dict[str, Any]:
    """Assemble the OpenAPI document for ``services``."""
    return OpenAPIAssembler(title, host, path_prefix=path_prefix, **kwargs).build(services)
