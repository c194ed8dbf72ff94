"""
Resource instances: a typed model value plus free-form metadata.

Hybrid resources keep their declared fields on a model and everything
else (category extensions, dynamic attributes) in ``metadata``. On the
wire both are flattened into one object; model fields take precedence
over metadata keys with the same name.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from endor.schema import SchemaGenerator, get_schema_generator
from endor.utils import to_jsonable, type_adapter

T = TypeVar("T")

ID_FIELD = "id"


@dataclass
class ResourceInstance(Generic[T]):
    """Domain value ``this`` with its metadata."""

    this: T
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def id(self) -> str | None:
        value = getattr(self.this, ID_FIELD, None)
        if value is None and isinstance(self.this, Mapping):
            value = self.this.get(ID_FIELD)
        return str(value) if value is not None and value != "" else None

    def to_dict(self) -> dict[str, Any]:
        """Flatten to one object; metadata never overrides model fields."""
        result = to_jsonable(self.this)
        if not isinstance(result, dict):
            result = {"value": result}
        for key, value in self.metadata.items():
            if key not in result:
                result[key] = to_jsonable(value)
        return result

    @classmethod
    def from_dict(
        cls,
        model: type[T],
        data: Mapping[str, Any],
        generator: SchemaGenerator | None = None,
    ) -> ResourceInstance[T]:
        """
        Split ``data`` into model fields and metadata.

        Raises:
            pydantic.ValidationError: If the model fields do not validate.
        """
        known = set((generator or get_schema_generator()).field_names(model))
        values = {k: v for k, v in data.items() if k in known}
        metadata = {k: v for k, v in data.items() if k not in known}
        this = type_adapter(model).validate_python(values)
        return cls(this=this, metadata=metadata)
