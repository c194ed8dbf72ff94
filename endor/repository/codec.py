"""
Document codecs.

A codec converts between a repository's element type and the plain
document a backend stores, and knows how to read and assign identity.
"""

from __future__ import annotations

import dataclasses
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from endor.schema import SchemaGenerator
from endor.utils import to_jsonable, type_adapter

from .instance import ID_FIELD, ResourceInstance

T = TypeVar("T")


class DocumentCodec(ABC, Generic[T]):
    """Conversion between ``T`` and stored documents."""

    id_field: str = ID_FIELD

    @abstractmethod
    def dump(self, value: T) -> dict[str, Any]:
        ...

    @abstractmethod
    def load(self, document: Mapping[str, Any]) -> T:
        ...

    @abstractmethod
    def identity(self, value: T) -> str | None:
        ...

    @abstractmethod
    def with_identity(self, value: T, identity: str) -> T:
        ...


class ModelCodec(DocumentCodec[T]):
    """
    Codec for pydantic models, dataclasses and plain dicts.

    Pass ``dict`` as the model to store untyped documents.
    """

    def __init__(self, model: type[T], id_field: str = ID_FIELD):
        self.model = model
        self.id_field = id_field

    def dump(self, value: T) -> dict[str, Any]:
        document = to_jsonable(value)
        if not isinstance(document, dict):
            raise TypeError(f"{type(value).__name__} does not serialize to an object")
        return document

    def load(self, document: Mapping[str, Any]) -> T:
        if self.model is dict:
            return dict(document)  # type: ignore[return-value]
        return type_adapter(self.model).validate_python(dict(document))

    def identity(self, value: T) -> str | None:
        if isinstance(value, Mapping):
            raw = value.get(self.id_field)
        else:
            raw = getattr(value, self.id_field, None)
        return str(raw) if raw not in (None, "") else None

    def with_identity(self, value: T, identity: str) -> T:
        if isinstance(value, BaseModel):
            return value.model_copy(update={self.id_field: identity})
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            return dataclasses.replace(value, **{self.id_field: identity})
        if isinstance(value, Mapping):
            return {**value, self.id_field: identity}  # type: ignore[return-value]
        raise TypeError(f"Cannot assign identity to {type(value).__name__}")


class InstanceCodec(DocumentCodec[ResourceInstance[T]]):
    """Codec for ResourceInstance values over a base model."""

    def __init__(
        self,
        base_model: type[T],
        id_field: str = ID_FIELD,
        generator: SchemaGenerator | None = None,
    ):
        self.base_model = base_model
        self.id_field = id_field
        self._inner = ModelCodec(base_model, id_field)
        self._generator = generator

    def dump(self, value: ResourceInstance[T]) -> dict[str, Any]:
        return value.to_dict()

    def load(self, document: Mapping[str, Any]) -> ResourceInstance[T]:
        return ResourceInstance.from_dict(self.base_model, document, self._generator)

    def identity(self, value: ResourceInstance[T]) -> str | None:
        return self._inner.identity(value.this)

    def with_identity(self, value: ResourceInstance[T], identity: str) -> ResourceInstance[T]:
        return ResourceInstance(
            this=self._inner.with_identity(value.this, identity),
            metadata=dict(value.metadata),
        )
