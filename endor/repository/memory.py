"""
In-memory repository adapter.

Stores serialized documents keyed by identity, so callers never share
references with the store. List filters support equality on top-level
keys and ``$and`` of such filters.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any, TypeVar

from bson import ObjectId

from endor.errors import ConflictError, NotFoundError, ValidationError

from .base import ListOptions, ReadOptions, ResourceRepository
from .codec import DocumentCodec

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _matches(document: Mapping[str, Any], query: Mapping[str, Any]) -> bool:
    for key, expected in query.items():
        if key == "$and":
            if not all(_matches(document, sub) for sub in expected):
                return False
        elif document.get(key) != expected:
            return False
    return True


def _project(document: dict[str, Any], projection: Mapping[str, Any] | None, id_field: str) -> dict[str, Any]:
    if not projection:
        return document
    included = {k for k, v in projection.items() if v}
    if included:
        return {k: v for k, v in document.items() if k in included or k == id_field}
    excluded = {k for k, v in projection.items() if not v}
    return {k: v for k, v in document.items() if k not in excluded}


class InMemoryResourceRepository(ResourceRepository[T]):
    """Dictionary-backed repository for tests and development."""

    def __init__(self, codec: DocumentCodec[T], **kwargs: Any):
        super().__init__(codec, **kwargs)
        self._documents: dict[str, dict[str, Any]] = {}

    def __len__(self) -> int:
        return len(self._documents)

    async def _instance(self, id: str, options: ReadOptions) -> T:
        document = self._documents.get(id)
        if document is None:
            raise NotFoundError(f"Resource with id {id} not found")
        return self.codec.load(_project(copy.deepcopy(document), options.projection, self.codec.id_field))

    async def _list(self, options: ListOptions) -> list[T]:
        documents = [copy.deepcopy(d) for d in self._documents.values() if _matches(d, options.filter)]
        for key, direction in reversed(options.sort or []):
            documents.sort(key=lambda d: (d.get(key) is None, d.get(key)), reverse=direction < 0)
        if options.limit is not None:
            documents = documents[: options.limit]
        return [self.codec.load(_project(d, options.projection, self.codec.id_field)) for d in documents]

    async def _create(self, value: T) -> T:
        identity = self.codec.identity(value)
        if identity is None:
            if not self.auto_generate_id:
                raise ValidationError("Missing id and automatic id generation is disabled")
            identity = str(ObjectId())
            value = self.codec.with_identity(value, identity)
        if identity in self._documents:
            raise ConflictError(f"Resource with id {identity} already exists")

        self._documents[identity] = self.codec.dump(value)
        logger.debug(f"Created resource {identity}")
        return self.codec.load(copy.deepcopy(self._documents[identity]))

    async def _update(self, id: str, value: T) -> T:
        if id not in self._documents:
            raise NotFoundError(f"Resource with id {id} not found")
        value = self.codec.with_identity(value, id)
        self._documents[id] = self.codec.dump(value)
        return self.codec.load(copy.deepcopy(self._documents[id]))

    async def _delete(self, id: str) -> None:
        if self._documents.pop(id, None) is None:
            raise NotFoundError(f"Resource with id {id} not found")
