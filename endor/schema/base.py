"""
Schema tree for Endor resources.

A Schema is an immutable, recursive description of a value's shape using
six type names (string, integer, number, boolean, object, array). It is
the canonical form used for payload validation and for documentation.

Schemas are built once at registration time. Combining schemas (see
``endor.schema.fragment.merge``) always yields a new tree.

Example:
    customer = Schema.object(
        {
            "id": Schema.string(read_only=True),
            "name": Schema.string(title="Name"),
            "tags": Schema.array(Schema.string()),
        },
        required=["name"],
    )
    customer.to_dict()
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

import yaml

from endor.errors import SchemaParseError


class SchemaType(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"


class SchemaFormat(str, Enum):
    """Well-known string formats understood by Endor clients."""

    DATE_TIME = "date-time"
    DATE = "date"
    TIME = "time"
    EMAIL = "email"
    HOSTNAME = "hostname"
    IPV4 = "ipv4"
    IPV6 = "ipv6"
    URI = "uri"
    UUID = "uuid"
    PASSWORD = "password"
    COUNTRY_CODE = "country-code"
    LANGUAGE_CODE = "language-code"
    CURRENCY = "currency"
    YAML = "yaml"
    JSON = "json"
    ASSET = "asset"
    IMAGE_ASSET = "image-asset"
    AUDIO_ASSET = "audio-asset"
    VIDEO_ASSET = "video-asset"


TYPE_NAMES = frozenset(t.value for t in SchemaType)


def _parse_type(value: Any) -> SchemaType:
    if isinstance(value, SchemaType):
        return value
    if not isinstance(value, str) or value not in TYPE_NAMES:
        raise SchemaParseError(
            f"Unknown schema type {value!r}; expected one of {sorted(TYPE_NAMES)}"
        )
    return SchemaType(value)


@dataclass(frozen=True, kw_only=True, slots=True)
class UISchema:
    """Presentation hints serialized under ``x-ui``."""

    resource: str | None = None
    order: tuple[str, ...] | None = None
    hidden: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.resource is not None:
            result["resource"] = self.resource
        if self.order is not None:
            result["order"] = list(self.order)
        if self.hidden is not None:
            result["hidden"] = self.hidden
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> UISchema:
        order = data.get("order")
        return cls(
            resource=data.get("resource"),
            order=tuple(order) if order is not None else None,
            hidden=data.get("hidden"),
        )


@dataclass(frozen=True, kw_only=True, slots=True)
class Schema:
    """
    One node of a schema tree.

    ``properties`` is only set on object nodes and ``items`` only on array
    nodes. ``name`` records the declared name of the type the node was
    derived from; it is not serialized and is used to deduplicate component
    schemas in OpenAPI output.
    """

    type: SchemaType
    properties: dict[str, Schema] | None = None
    items: Schema | None = None
    title: str | None = None
    description: str | None = None
    required: tuple[str, ...] | None = None
    format: str | None = None
    read_only: bool | None = None
    write_only: bool | None = None
    enum: tuple[Any, ...] | None = None
    min_length: int | None = None
    max_length: int | None = None
    ui: UISchema | None = None
    name: str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.properties is not None and self.type != SchemaType.OBJECT:
            raise ValueError(f"properties are only allowed on object schemas, not {self.type.value}")
        if self.items is not None and self.type != SchemaType.ARRAY:
            raise ValueError(f"items are only allowed on array schemas, not {self.type.value}")

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def string(cls, **kwargs: Any) -> Schema:
        return cls(type=SchemaType.STRING, **kwargs)

    @classmethod
    def integer(cls, **kwargs: Any) -> Schema:
        return cls(type=SchemaType.INTEGER, **kwargs)

    @classmethod
    def number(cls, **kwargs: Any) -> Schema:
        return cls(type=SchemaType.NUMBER, **kwargs)

    @classmethod
    def boolean(cls, **kwargs: Any) -> Schema:
        return cls(type=SchemaType.BOOLEAN, **kwargs)

    @classmethod
    def object(
        cls,
        properties: Mapping[str, Schema] | None = None,
        *,
        required: Iterable[str] | None = None,
        **kwargs: Any,
    ) -> Schema:
        return cls(
            type=SchemaType.OBJECT,
            properties=dict(properties) if properties is not None else {},
            required=tuple(required) if required else None,
            **kwargs,
        )

    @classmethod
    def array(cls, items: Schema, **kwargs: Any) -> Schema:
        return cls(type=SchemaType.ARRAY, items=items, **kwargs)

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def property_names(self) -> list[str]:
        return list(self.properties or {})

    def get_property(self, name: str) -> Schema | None:
        return (self.properties or {}).get(name)

    def evolve(self, **changes: Any) -> Schema:
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self, child: Callable[[Schema], dict[str, Any]] | None = None) -> dict[str, Any]:
        """
        Serialize to the JSON-schema wire shape.

        Args:
            child: Optional callback used to render nested schemas, so a
                caller can substitute ``$ref`` objects for named children.
        """
        render = child or (lambda s: s.to_dict())
        result: dict[str, Any] = {"type": self.type.value}

        if self.title is not None:
            result["title"] = self.title
        if self.description is not None:
            result["description"] = self.description
        if self.format is not None:
            result["format"] = self.format
        if self.read_only is not None:
            result["readOnly"] = self.read_only
        if self.write_only is not None:
            result["writeOnly"] = self.write_only
        if self.enum is not None:
            result["enum"] = list(self.enum)
        if self.min_length is not None:
            result["minLength"] = self.min_length
        if self.max_length is not None:
            result["maxLength"] = self.max_length
        if self.properties is not None:
            result["properties"] = {k: render(v) for k, v in self.properties.items()}
        if self.required:
            result["required"] = list(self.required)
        if self.items is not None:
            result["items"] = render(self.items)
        if self.ui is not None:
            ui = self.ui.to_dict()
            if ui:
                result["x-ui"] = ui

        return result

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_dict(), sort_keys=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, name: str | None = None) -> Schema:
        """
        Parse the JSON-schema wire shape.

        Raises:
            SchemaParseError: If a type name is unknown or a node is not a mapping.
        """
        if not isinstance(data, Mapping):
            raise SchemaParseError(f"Schema node must be a mapping, got {type(data).__name__}")

        schema_type = _parse_type(data.get("type", SchemaType.OBJECT.value))

        properties = None
        raw_properties = data.get("properties")
        if raw_properties is not None:
            if not isinstance(raw_properties, Mapping):
                raise SchemaParseError("'properties' must be a mapping")
            properties = {str(k): cls.from_dict(v) for k, v in raw_properties.items()}
        elif schema_type == SchemaType.OBJECT:
            properties = {}

        items = None
        if data.get("items") is not None:
            items = cls.from_dict(data["items"])

        required = data.get("required")
        enum = data.get("enum")
        ui = data.get("x-ui")

        try:
            return cls(
                type=schema_type,
                properties=properties,
                items=items,
                title=data.get("title"),
                description=data.get("description"),
                required=tuple(required) if required else None,
                format=data.get("format"),
                read_only=data.get("readOnly"),
                write_only=data.get("writeOnly"),
                enum=tuple(enum) if enum is not None else None,
                min_length=data.get("minLength"),
                max_length=data.get("maxLength"),
                ui=UISchema.from_dict(ui) if isinstance(ui, Mapping) else None,
                name=name,
            )
        except ValueError as e:
            raise SchemaParseError(str(e)) from e
