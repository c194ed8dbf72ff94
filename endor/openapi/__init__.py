"""
Endor OpenAPI Assembler

Builds OpenAPI 3.1.0 documents from registered services.
"""

from .assembler import (
    DEFAULT_PATH_PREFIX,
    DEFAULT_RESPONSE,
    OPENAPI_VERSION,
    SECURITY_SCHEME,
    OpenAPIAssembler,
    build_openapi_document,
    component_ref,
)

__all__ = [
    "OpenAPIAssembler",
    "build_openapi_document",
    "component_ref",
    "DEFAULT_PATH_PREFIX",
    "DEFAULT_RESPONSE",
    "OPENAPI_VERSION",
    "SECURITY_SCHEME",
]
