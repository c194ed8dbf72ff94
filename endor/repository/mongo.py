"""
MongoDB repository adapter (motor).

Documents are stored with the resource identity in ``_id``. Identities
that are valid ObjectId hex strings are stored as ObjectId; anything else
is stored as the plain string.

Example:
    client = AsyncIOMotorClient(settings.document_db_uri.get_secret_value())
    repository = MongoResourceRepository(
        client["endor"]["customers"],
        InstanceCodec(Customer),
    )
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, TypeVar

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.errors import DuplicateKeyError, PyMongoError

from endor.errors import ConflictError, InternalServerError, NotFoundError, ValidationError

from .base import ListOptions, ReadOptions, ResourceRepository
from .codec import DocumentCodec

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _to_key(identity: str) -> ObjectId | str:
    return ObjectId(identity) if ObjectId.is_valid(identity) else identity


class MongoResourceRepository(ResourceRepository[T]):
    """ResourceRepository over a motor collection."""

    def __init__(self, collection: AsyncIOMotorCollection, codec: DocumentCodec[T], **kwargs: Any):
        super().__init__(codec, **kwargs)
        self.collection = collection

    def _to_document(self, value: T) -> dict[str, Any]:
        document = self.codec.dump(value)
        identity = document.pop(self.codec.id_field, None)
        if identity:
            document["_id"] = _to_key(str(identity))
        return document

    def _from_document(self, document: Mapping[str, Any]) -> T:
        data = dict(document)
        if "_id" in data:
            data[self.codec.id_field] = str(data.pop("_id"))
        return self.codec.load(data)

    async def _instance(self, id: str, options: ReadOptions) -> T:
        try:
            document = await self.collection.find_one({"_id": _to_key(id)}, options.projection)
        except PyMongoError as e:
            raise InternalServerError(f"Failed to read resource {id}: {e}") from e
        if document is None:
            raise NotFoundError(f"Resource with id {id} not found")
        return self._from_document(document)

    async def _list(self, options: ListOptions) -> list[T]:
        try:
            cursor = self.collection.find(dict(options.filter), options.projection)
            if options.sort:
                cursor = cursor.sort(options.sort)
            if options.limit is not None:
                cursor = cursor.limit(options.limit)
            documents = await cursor.to_list(length=None)
        except PyMongoError as e:
            raise InternalServerError(f"Failed to list resources: {e}") from e
        return [self._from_document(d) for d in documents]

    async def _create(self, value: T) -> T:
        if self.codec.identity(value) is None:
            if not self.auto_generate_id:
                raise ValidationError("Missing id and automatic id generation is disabled")
            value = self.codec.with_identity(value, str(ObjectId()))

        document = self._to_document(value)
        try:
            await self.collection.insert_one(document)
        except DuplicateKeyError as e:
            raise ConflictError(f"Resource with id {document['_id']} already exists") from e
        except PyMongoError as e:
            raise InternalServerError(f"Failed to create resource: {e}") from e

        logger.debug(f"Created resource {document['_id']} in {self.collection.name}")
        return self._from_document(document)

    async def _update(self, id: str, value: T) -> T:
        document = self._to_document(self.codec.with_identity(value, id))
        try:
            result = await self.collection.replace_one({"_id": _to_key(id)}, document)
        except PyMongoError as e:
            raise InternalServerError(f"Failed to update resource {id}: {e}") from e
        if result.matched_count == 0:
            raise NotFoundError(f"Resource with id {id} not found")
        return self._from_document(document)

    async def _delete(self, id: str) -> None:
        try:
            result = await self.collection.delete_one({"_id": _to_key(id)})
        except PyMongoError as e:
            raise InternalServerError(f"Failed to delete resource {id}: {e}") from e
        if result.deleted_count == 0:
            raise NotFoundError(f"Resource with id {id} not found")
