"""
YAML schema fragments and schema merging.

Categories and hybrid resources can declare extra attributes as a YAML
document instead of a Python type. Three layouts are accepted:

    # wrapped
    schema:
      type: object
      properties:
        additionalNote: {type: string}

    # bare object schema
    type: object
    properties:
      additionalNote: {type: string}

    # property map (short form)
    additionalNote:
      type: string
    weight: number
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import yaml

from endor.errors import SchemaParseError

from .base import TYPE_NAMES, Schema, SchemaType, UISchema

logger = logging.getLogger(__name__)

_SCHEMA_KEYWORDS = frozenset(
    {
        "type",
        "properties",
        "items",
        "title",
        "description",
        "required",
        "format",
        "readOnly",
        "writeOnly",
        "enum",
        "minLength",
        "maxLength",
        "x-ui",
    }
)


def _looks_like_schema(data: Mapping[str, Any]) -> bool:
    kind = data.get("type")
    return isinstance(kind, str) and kind in TYPE_NAMES and set(data) <= _SCHEMA_KEYWORDS


def parse_fragment(yaml_text: str | None) -> Schema:
    """
    Parse a YAML schema fragment into an object Schema.

    Raises:
        SchemaParseError: On malformed YAML or an unknown type name.
    """
    if not yaml_text or not yaml_text.strip():
        return Schema.object()

    try:
        data = yaml.safe_load(yaml_text)
    except yaml.YAMLError as e:
        raise SchemaParseError(f"Invalid schema fragment YAML: {e}") from e

    if data is None:
        return Schema.object()
    if not isinstance(data, Mapping):
        raise SchemaParseError(
            f"Schema fragment must be a mapping, got {type(data).__name__}"
        )

    if "schema" in data and len(data) == 1:
        data = data["schema"]
        if not isinstance(data, Mapping):
            raise SchemaParseError("'schema' must be a mapping")

    if _looks_like_schema(data):
        schema = Schema.from_dict(data)
    else:
        properties = {str(name): _parse_property(name, value) for name, value in data.items()}
        schema = Schema.object(properties)

    if schema.type != SchemaType.OBJECT:
        raise SchemaParseError(f"Schema fragment must describe an object, got {schema.type.value}")

    logger.debug(f"Parsed schema fragment with properties {schema.property_names}")
    return schema


def _parse_property(name: Any, value: Any) -> Schema:
    if isinstance(value, str):
        return Schema.from_dict({"type": value})
    if isinstance(value, Mapping):
        return Schema.from_dict(value)
    raise SchemaParseError(f"Property '{name}' must be a type name or a schema mapping")


def merge(base: Schema, fragment: Schema) -> Schema:
    """
    Union the properties of two object schemas.

    Fragment properties win on conflict, ``required`` lists are unioned and
    the base node's metadata is kept. Returns a new, unnamed tree.
    """
    properties = dict(base.properties or {})
    properties.update(fragment.properties or {})

    required = list(base.required or ())
    required.extend(r for r in fragment.required or () if r not in required)

    ui = base.ui
    if base.ui is not None and base.ui.order is not None:
        order = list(base.ui.order)
        order.extend(k for k in properties if k not in order)
        ui = UISchema(resource=base.ui.resource, order=tuple(order), hidden=base.ui.hidden)

    return base.evolve(
        type=SchemaType.OBJECT,
        properties=properties,
        items=None,
        required=tuple(required) if required else None,
        ui=ui,
        name=None,
    )


def merge_all(base: Schema, *fragments: Schema | None) -> Schema:
    """Fold ``merge`` over fragments left to right, skipping ``None``."""
    result = base
    for fragment in fragments:
        if fragment is not None:
            result = merge(result, fragment)
    return result
