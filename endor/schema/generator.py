"""
Schema generation from Python types.

SchemaGenerator walks a model type (dataclass, pydantic model or any class
with annotations) and produces its Schema tree. Leaf types are resolved
through a descriptor registry that can be extended at startup:

    generator = SchemaGenerator()
    generator.register_type(Money, Schema.string(format="currency"))
    schema = generator.generate(Invoice)

Field metadata is attached with SchemaTag, either inside ``Annotated``:

    @dataclass
    class Customer:
        id: Annotated[str, SchemaTag(read_only=True)]
        email: Annotated[str, SchemaTag(title="Email", format="email", required=True)]

or through ``schema_field()`` on dataclasses, or ``json_schema_extra`` on
pydantic fields.

Generation never raises: types it cannot describe become an object schema
with no properties.
"""

from __future__ import annotations

import dataclasses
import logging
import re
import types
import typing
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Literal, TypeVar, Union, get_args, get_origin
from uuid import UUID

from bson import ObjectId
from pydantic import BaseModel

from .base import Schema, SchemaFormat, SchemaType, UISchema

logger = logging.getLogger(__name__)


# =============================================================================
# Field Metadata
# =============================================================================


def _as_order(value: Any) -> tuple[str, ...] | None:
    return tuple(str(v) for v in value) if value else None


@dataclass(frozen=True, kw_only=True, slots=True)
class SchemaTag:
    """Per-field schema metadata."""

    title: str | None = None
    description: str | None = None
    required: bool = False
    format: str | SchemaFormat | None = None
    read_only: bool | None = None
    write_only: bool | None = None
    min_length: int | None = None
    max_length: int | None = None
    hidden: bool | None = None
    resource: str | None = None
    order: tuple[str, ...] | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> SchemaTag:
        """Build a tag from JSON-schema style keys (``readOnly``, ``x-ui`` ...)."""
        ui = data.get("x-ui") or {}
        return cls(
            title=data.get("title"),
            description=data.get("description"),
            required=bool(data.get("required", False)),
            format=data.get("format"),
            read_only=data.get("readOnly", data.get("read_only")),
            write_only=data.get("writeOnly", data.get("write_only")),
            min_length=data.get("minLength", data.get("min_length")),
            max_length=data.get("maxLength", data.get("max_length")),
            hidden=ui.get("hidden", data.get("hidden")),
            resource=ui.get("resource", data.get("resource")),
            order=_as_order(ui.get("order", data.get("order"))),
        )

    def merged(self, other: SchemaTag) -> SchemaTag:
        """Combine two tags; values set on ``other`` win."""
        changes = {}
        for f in dataclasses.fields(other):
            value = getattr(other, f.name)
            if value is not None and value is not False:
                changes[f.name] = value
        return dataclasses.replace(self, **changes)

    def apply(self, schema: Schema) -> Schema:
        changes: dict[str, Any] = {}
        if self.title is not None:
            changes["title"] = self.title
        if self.description is not None:
            changes["description"] = self.description
        if self.format is not None:
            changes["format"] = (
                self.format.value if isinstance(self.format, SchemaFormat) else self.format
            )
        if self.read_only is not None:
            changes["read_only"] = self.read_only
        if self.write_only is not None:
            changes["write_only"] = self.write_only
        if self.min_length is not None:
            changes["min_length"] = self.min_length
        if self.max_length is not None:
            changes["max_length"] = self.max_length
        if self.hidden is not None or self.resource is not None or self.order is not None:
            base_ui = schema.ui or UISchema()
            changes["ui"] = UISchema(
                resource=self.resource if self.resource is not None else base_ui.resource,
                order=self.order if self.order is not None else base_ui.order,
                hidden=self.hidden if self.hidden is not None else base_ui.hidden,
            )
        if not changes:
            return schema
        if schema.name is not None:
            # Field-level metadata makes the node specific to this field
            changes["name"] = None
        return schema.evolve(**changes)


def schema_field(
    default: Any = dataclasses.MISSING,
    *,
    default_factory: Any = dataclasses.MISSING,
    **tag: Any,
) -> Any:
    """
    Dataclass field carrying a SchemaTag.

    Example:
        @dataclass
        class Customer:
            name: str = schema_field(title="Name", required=True)
    """
    if "order" in tag:
        tag["order"] = _as_order(tag["order"])
    return dataclasses.field(
        default=default,
        default_factory=default_factory,
        metadata={"schema": SchemaTag(**tag)},
    )


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """A visible field of a model: serialization name, annotation and metadata."""

    name: str
    annotation: Any
    tag: SchemaTag
    required: bool = False


# =============================================================================
# Helpers
# =============================================================================


_NONE_TYPE = type(None)


def type_name(model: Any) -> str:
    """Declared name of a type, normalized for use as a component key."""
    raw = getattr(model, "__name__", None) or str(model)
    return re.sub(r"[^A-Za-z0-9_]+", "_", raw).strip("_")


def _is_model_class(tp: Any) -> bool:
    if not isinstance(tp, type):
        return False
    if dataclasses.is_dataclass(tp) or issubclass(tp, BaseModel):
        return True
    return bool(getattr(tp, "__annotations__", None)) and tp.__module__ != "builtins"


def _split_annotated(annotation: Any) -> tuple[Any, list[SchemaTag]]:
    tags: list[SchemaTag] = []
    while get_origin(annotation) is Annotated:
        base, *extras = get_args(annotation)
        tags.extend(e for e in extras if isinstance(e, SchemaTag))
        annotation = base
    return annotation, tags


def _unwrap_optional(annotation: Any) -> Any:
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(annotation) if a is not _NONE_TYPE]
        if len(args) == 1:
            return args[0]
    return annotation


def _combine(tags: Sequence[SchemaTag]) -> SchemaTag:
    result = SchemaTag()
    for tag in tags:
        result = result.merged(tag)
    return result


# =============================================================================
# Generator
# =============================================================================


class SchemaGenerator:
    """
    Type-descriptor registry and model walker.

    The registry maps leaf Python types to schemas. Model types are walked
    field by field; containers recurse into their element type.
    """

    def __init__(self) -> None:
        self._descriptors: dict[type, Schema] = {
            str: Schema.string(),
            bool: Schema.boolean(),
            int: Schema.integer(),
            float: Schema.number(),
            Decimal: Schema.number(),
            ObjectId: Schema.string(),
            datetime: Schema.string(format=SchemaFormat.DATE_TIME.value),
            date: Schema.string(format=SchemaFormat.DATE.value),
            time: Schema.string(format=SchemaFormat.TIME.value),
            UUID: Schema.string(format=SchemaFormat.UUID.value),
        }

    def register_type(self, py_type: type, schema: Schema) -> None:
        """Describe ``py_type`` with a fixed schema."""
        self._descriptors[py_type] = schema
        logger.debug(f"Registered schema descriptor for {type_name(py_type)}")

    def is_registered(self, py_type: type) -> bool:
        return py_type in self._descriptors

    def generate(self, model: Any) -> Schema:
        """
        Generate the schema for a type, or for the type of a value.

        Args:
            model: A type (class, typing construct) or an instance.

        Returns:
            Schema tree. Never raises.
        """
        if not isinstance(model, type) and get_origin(model) is None and not _is_typing_construct(model):
            model = type(model)
        return self._visit(model, frozenset())

    def fields(self, model: type) -> list[FieldDescriptor]:
        """Visible fields of a model class, in declaration order."""
        if isinstance(model, type) and issubclass(model, BaseModel):
            return self._pydantic_fields(model)
        hints = self._type_hints(model)
        if dataclasses.is_dataclass(model):
            result = []
            for f in dataclasses.fields(model):
                if f.name.startswith("_") or f.name not in hints:
                    continue
                annotation, tags = _split_annotated(hints[f.name])
                meta = f.metadata.get("schema")
                if isinstance(meta, Mapping):
                    meta = SchemaTag.from_mapping(meta)
                if isinstance(meta, SchemaTag):
                    tags.append(meta)
                tag = _combine(tags)
                result.append(FieldDescriptor(f.name, annotation, tag, tag.required))
            return result
        result = []
        for name, hint in hints.items():
            if name.startswith("_") or get_origin(hint) is typing.ClassVar:
                continue
            annotation, tags = _split_annotated(hint)
            tag = _combine(tags)
            result.append(FieldDescriptor(name, annotation, tag, tag.required))
        return result

    def field_names(self, model: type) -> list[str]:
        return [f.name for f in self.fields(model)]

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _visit(self, annotation: Any, seen: frozenset[type]) -> Schema:
        annotation, tags = _split_annotated(annotation)
        annotation = _unwrap_optional(annotation)
        schema = self._describe(annotation, seen)
        return _combine(tags).apply(schema) if tags else schema

    def _describe(self, annotation: Any, seen: frozenset[type]) -> Schema:
        if annotation in self._descriptors:
            return self._descriptors[annotation]

        origin = get_origin(annotation)
        args = get_args(annotation)

        if origin is Literal:
            values = tuple(args)
            kind = SchemaType.INTEGER if all(isinstance(v, int) and not isinstance(v, bool) for v in values) else SchemaType.STRING
            return Schema(type=kind, enum=values)

        if origin is not None:
            if isinstance(origin, type) and issubclass(origin, Mapping):
                return Schema.object()
            if isinstance(origin, type) and issubclass(origin, (Sequence, set, frozenset)) and not issubclass(origin, (str, bytes)):
                element = args[0] if args else Any
                return Schema.array(self._visit(element, seen))
            if isinstance(origin, type) and _is_model_class(origin):
                # Parametrized generic dataclass; the type vars degrade to objects
                return self._describe(origin, seen)
            logger.debug(f"No schema descriptor for {annotation!r}, using empty object")
            return Schema.object()

        if isinstance(annotation, type):
            if issubclass(annotation, Enum):
                values = tuple(m.value for m in annotation)
                kind = SchemaType.INTEGER if all(isinstance(v, int) for v in values) else SchemaType.STRING
                return Schema(type=kind, enum=values)
            for py_type, schema in self._descriptors.items():
                if issubclass(annotation, py_type) and not (py_type is int and annotation is bool):
                    return schema
            if issubclass(annotation, Mapping):
                return Schema.object()
            if issubclass(annotation, (list, tuple, set, frozenset)):
                return Schema.array(Schema.object())
            if _is_model_class(annotation):
                return self._describe_model(annotation, seen)

        if not isinstance(annotation, TypeVar) and annotation is not Any:
            logger.debug(f"No schema descriptor for {annotation!r}, using empty object")
        return Schema.object()

    def _describe_model(self, model: type, seen: frozenset[type]) -> Schema:
        name = type_name(model)
        if model in seen:
            return Schema.object(description=f"Recursive reference to {name}")
        seen = seen | {model}

        properties: dict[str, Schema] = {}
        required: list[str] = []
        for descriptor in self.fields(model):
            prop = self._visit(descriptor.annotation, seen)
            properties[descriptor.name] = descriptor.tag.apply(prop)
            if descriptor.required:
                required.append(descriptor.name)

        return Schema.object(properties, required=required, name=name)

    def _pydantic_fields(self, model: type[BaseModel]) -> list[FieldDescriptor]:
        result = []
        for field_name, info in model.model_fields.items():
            if field_name.startswith("_"):
                continue
            annotation, tags = _split_annotated(info.annotation)
            tags.extend(m for m in info.metadata if isinstance(m, SchemaTag))
            if isinstance(info.json_schema_extra, Mapping):
                tags.append(SchemaTag.from_mapping(info.json_schema_extra))
            if info.title or info.description:
                tags.append(SchemaTag(title=info.title, description=info.description))
            tag = _combine(tags)
            name = info.serialization_alias or info.alias or field_name
            result.append(FieldDescriptor(name, annotation, tag, tag.required or info.is_required()))
        return result

    def _type_hints(self, model: type) -> dict[str, Any]:
        try:
            return typing.get_type_hints(model, include_extras=True)
        except Exception as e:
            # Unresolvable forward references: keep the names, lose the types
            logger.warning(f"Could not resolve type hints for {type_name(model)}: {e}")
            hints: dict[str, Any] = {}
            for klass in reversed(model.__mro__):
                hints.update(getattr(klass, "__annotations__", {}))
            return hints


def _is_typing_construct(value: Any) -> bool:
    return isinstance(value, TypeVar) or value is Any or type(value).__module__ == "typing"


_default_generator: SchemaGenerator | None = None


def get_schema_generator() -> SchemaGenerator:
    """Process-wide default generator."""
    global _default_generator
    if _default_generator is None:
        _default_generator = SchemaGenerator()
    return _default_generator


def generate(model: Any) -> Schema:
    """Generate a schema with the default generator."""
    return get_schema_generator().generate(model)
