"""
Tests for the Endor schema engine.

Tests cover:
- Primitive type mapping
- Nested models and arrays of models
- Field metadata from SchemaTag, schema_field and pydantic Field
- Degradation of unsupported and recursive types
- Schema node invariants and wire serialization
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Literal, Optional

import pytest
from bson import ObjectId

from endor.errors import SchemaParseError
from endor.schema import (
    Schema,
    SchemaFormat,
    SchemaGenerator,
    SchemaTag,
    SchemaType,
    generate,
    schema_field,
)

# =============================================================================
# Test Models
# =============================================================================


@dataclass
class Primitives:
    name: str
    count: int
    ratio: float
    active: bool


@dataclass
class Line:
    sku: str
    qty: int


@dataclass
class Order:
    id: ObjectId
    placed_at: datetime
    lines: list[Line]
    matrix: list[list[Line]]
    total: Decimal


@dataclass
class Contact:
    email: Annotated[str, SchemaTag(title="Email", format=SchemaFormat.EMAIL, required=True)]
    code: str = schema_field(default="", title="Code", read_only=True)
    note: Optional[str] = None
    _internal: str = ""


class Status(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"


@dataclass
class Tagged:
    status: Status
    level: Literal[1, 2, 3]
    attributes: dict[str, Any]
    anything: object


@dataclass
class Node:
    value: int
    children: list["Node"]


@dataclass
class Address:
    street: str
    city: str


@dataclass
class Profile:
    address: Annotated[Address, SchemaTag(order=("city", "street"), resource="addresses")]
    nickname: str = schema_field(default="", hidden=True)


# =============================================================================
# Primitive Mapping
# =============================================================================


class TestPrimitiveMapping:
    """Tests for leaf type descriptors."""

    def test_property_keys_follow_field_names(self):
        schema = generate(Primitives)

        assert schema.type == SchemaType.OBJECT
        assert schema.property_names == ["name", "count", "ratio", "active"]

    def test_primitive_types(self):
        props = generate(Primitives).properties

        assert props["name"].type == SchemaType.STRING
        assert props["count"].type == SchemaType.INTEGER
        assert props["ratio"].type == SchemaType.NUMBER
        assert props["active"].type == SchemaType.BOOLEAN

    def test_int_is_integer_not_number(self):
        assert generate(int).type == SchemaType.INTEGER
        assert generate(bool).type == SchemaType.BOOLEAN

    def test_object_id_is_string(self):
        props = generate(Order).properties

        assert props["id"] == Schema.string()

    def test_datetime_is_date_time_string(self):
        props = generate(Order).properties

        assert props["placed_at"].type == SchemaType.STRING
        assert props["placed_at"].format == "date-time"

    def test_decimal_is_number(self):
        assert generate(Order).properties["total"].type == SchemaType.NUMBER

    def test_generate_from_value(self):
        """Passing an instance describes its type."""
        assert generate(Line(sku="a", qty=1)) == generate(Line)

    def test_register_custom_type(self):
        class Money:
            pass

        generator = SchemaGenerator()
        generator.register_type(Money, Schema.string(format="currency"))

        assert generator.generate(Money).format == "currency"
        assert generator.is_registered(Money)


# =============================================================================
# Nesting
# =============================================================================


class TestNesting:
    """Tests for nested models and arrays."""

    def test_array_items_equal_element_schema(self):
        assert generate(Order).properties["lines"].items == generate(Line)

    def test_nested_arrays_recurse(self):
        matrix = generate(Order).properties["matrix"]

        assert matrix.type == SchemaType.ARRAY
        assert matrix.items.type == SchemaType.ARRAY
        assert matrix.items.items == generate(Line)

    def test_generate_list_type(self):
        schema = generate(list[Line])

        assert schema.type == SchemaType.ARRAY
        assert schema.items == generate(Line)

    def test_nested_model_keeps_type_name(self):
        assert generate(Order).properties["lines"].items.name == "Line"
        assert generate(Order).name == "Order"

    def test_generation_is_deterministic(self):
        assert generate(Order) == generate(Order)
        assert generate(Order).to_dict() == generate(Order).to_dict()


# =============================================================================
# Field Metadata
# =============================================================================


class TestFieldMetadata:
    """Tests for SchemaTag handling."""

    def test_annotated_tag(self):
        email = generate(Contact).properties["email"]

        assert email.title == "Email"
        assert email.format == "email"

    def test_required_tag_lists_field_on_parent(self):
        assert generate(Contact).required == ("email",)

    def test_schema_field_tag(self):
        code = generate(Contact).properties["code"]

        assert code.title == "Code"
        assert code.read_only is True

    def test_optional_is_unwrapped(self):
        assert generate(Contact).properties["note"] == Schema.string()

    def test_private_fields_are_hidden(self):
        assert "_internal" not in generate(Contact).property_names

    def test_ui_tags(self):
        props = generate(Profile).properties

        assert props["address"].ui.order == ("city", "street")
        assert props["address"].ui.resource == "addresses"
        assert props["nickname"].ui.hidden is True
        assert props["address"].to_dict()["x-ui"] == {"resource": "addresses", "order": ["city", "street"]}

    def test_tagged_model_field_is_unnamed(self):
        props = generate(Profile).properties

        assert props["address"].name is None
        assert generate(Address).name == "Address"

    def test_pydantic_aliases_and_required(self, customer_model):
        schema = generate(customer_model)

        assert schema.property_names == ["id", "name", "createdAt"]
        assert schema.required == ("name",)
        assert schema.properties["name"].title == "Name"
        assert schema.properties["id"].read_only is True
        assert schema.properties["createdAt"].format == "date-time"


# =============================================================================
# Degradation
# =============================================================================


class TestDegradation:
    """Generation never fails."""

    def test_enum_and_literal(self):
        props = generate(Tagged).properties

        assert props["status"].type == SchemaType.STRING
        assert props["status"].enum == ("active", "archived")
        assert props["level"].type == SchemaType.INTEGER
        assert props["level"].enum == (1, 2, 3)

    def test_mapping_is_object_without_properties(self):
        assert generate(Tagged).properties["attributes"] == Schema.object()

    def test_unsupported_type_is_empty_object(self):
        assert generate(Tagged).properties["anything"] == Schema.object()

    def test_recursive_type_degrades(self):
        children = generate(Node).properties["children"]

        assert children.type == SchemaType.ARRAY
        assert children.items.type == SchemaType.OBJECT
        assert children.items.description == "Recursive reference to Node"


# =============================================================================
# Schema Node
# =============================================================================


class TestSchemaNode:
    """Tests for the Schema dataclass."""

    def test_properties_only_on_objects(self):
        with pytest.raises(ValueError):
            Schema(type=SchemaType.STRING, properties={})

    def test_items_only_on_arrays(self):
        with pytest.raises(ValueError):
            Schema(type=SchemaType.OBJECT, items=Schema.string())

    def test_name_does_not_affect_equality(self):
        assert Schema.object({"a": Schema.string()}, name="A") == Schema.object({"a": Schema.string()}, name="B")

    def test_to_dict_uses_wire_keys(self):
        schema = Schema.object(
            {"code": Schema.string(read_only=True, max_length=8)},
            required=["code"],
        )

        assert schema.to_dict() == {
            "type": "object",
            "properties": {"code": {"type": "string", "readOnly": True, "maxLength": 8}},
            "required": ["code"],
        }

    def test_from_dict_rejects_unknown_type(self):
        with pytest.raises(SchemaParseError):
            Schema.from_dict({"type": "object", "properties": {"a": {"type": "text"}}})

    def test_from_dict_parses_nested(self):
        schema = Schema.from_dict(
            {
                "type": "object",
                "properties": {"tags": {"type": "array", "items": {"type": "string"}}},
            }
        )

        assert schema.properties["tags"].items == Schema.string()

    def test_to_yaml(self):
        text = Schema.object({"a": Schema.integer()}).to_yaml()

        assert "type: object" in text
        assert "type: integer" in text
