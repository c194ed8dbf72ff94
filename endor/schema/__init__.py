"""
Endor Schema Engine

Canonical schema trees, generation from Python types, YAML fragments
and JSON-schema validation.

Example:
    from endor.schema import generate, merge, parse_fragment

    base = generate(Customer)
    extra = parse_fragment("additionalNote: {type: string}")
    composite = merge(base, extra)
"""

from .base import Schema, SchemaFormat, SchemaType, UISchema
from .fragment import merge, merge_all, parse_fragment
from .generator import (
    FieldDescriptor,
    SchemaGenerator,
    SchemaTag,
    generate,
    get_schema_generator,
    schema_field,
    type_name,
)
from .validation import format_path, schema_validator, validate_value

__all__ = [
    # Tree
    "Schema",
    "SchemaType",
    "SchemaFormat",
    "UISchema",
    # Generation
    "SchemaGenerator",
    "SchemaTag",
    "FieldDescriptor",
    "schema_field",
    "generate",
    "get_schema_generator",
    "type_name",
    # Fragments
    "parse_fragment",
    "merge",
    "merge_all",
    # Validation
    "schema_validator",
    "validate_value",
    "format_path",
]
