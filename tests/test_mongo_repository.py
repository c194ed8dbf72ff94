"""
Tests for the MongoDB repository adapter against a mocked motor collection.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError, ServerSelectionTimeoutError

from endor.errors import ConflictError, InternalServerError, NotFoundError
from endor.repository import ListOptions, ModelCodec, MongoResourceRepository

OID = "659f27cce7fd9277b3cc4ef7"


@pytest.fixture
def collection():
    collection = MagicMock()
    collection.find_one = AsyncMock()
    collection.insert_one = AsyncMock()
    collection.replace_one = AsyncMock()
    collection.delete_one = AsyncMock()
    return collection


@pytest.fixture
def repository(collection):
    return MongoResourceRepository(collection, ModelCodec(dict))


class TestMongoResourceRepository:
    """Tests for MongoResourceRepository."""

    @pytest.mark.asyncio
    async def test_instance_maps_object_id(self, repository, collection):
        collection.find_one.return_value = {"_id": ObjectId(OID), "name": "Ada"}

        result = await repository.instance(OID)

        assert result == {"id": OID, "name": "Ada"}
        collection.find_one.assert_awaited_once_with({"_id": ObjectId(OID)}, None)

    @pytest.mark.asyncio
    async def test_instance_plain_string_key(self, repository, collection):
        collection.find_one.return_value = {"_id": "custom-key"}

        await repository.instance("custom-key")

        collection.find_one.assert_awaited_once_with({"_id": "custom-key"}, None)

    @pytest.mark.asyncio
    async def test_instance_not_found(self, repository, collection):
        collection.find_one.return_value = None

        with pytest.raises(NotFoundError):
            await repository.instance(OID)

    @pytest.mark.asyncio
    async def test_list(self, repository, collection):
        cursor = MagicMock()
        cursor.sort.return_value = cursor
        cursor.limit.return_value = cursor
        cursor.to_list = AsyncMock(return_value=[{"_id": "a"}, {"_id": "b"}])
        collection.find.return_value = cursor

        results = await repository.list(ListOptions(filter={"category": "x"}, sort=[("name", 1)], limit=5))

        assert [r["id"] for r in results] == ["a", "b"]
        collection.find.assert_called_once_with({"category": "x"}, None)
        cursor.sort.assert_called_once_with([("name", 1)])
        cursor.limit.assert_called_once_with(5)

    @pytest.mark.asyncio
    async def test_create_generates_object_id(self, repository, collection):
        created = await repository.create({"name": "Ada"})

        stored = collection.insert_one.await_args.args[0]
        assert isinstance(stored["_id"], ObjectId)
        assert created["id"] == str(stored["_id"])
        assert "id" not in stored

    @pytest.mark.asyncio
    async def test_create_conflict(self, repository, collection):
        collection.insert_one.side_effect = DuplicateKeyError("duplicate key")

        with pytest.raises(ConflictError):
            await repository.create({"id": OID})

    @pytest.mark.asyncio
    async def test_driver_error(self, repository, collection):
        collection.insert_one.side_effect = ServerSelectionTimeoutError("no servers")

        with pytest.raises(InternalServerError):
            await repository.create({"id": OID})

    @pytest.mark.asyncio
    async def test_update_not_found(self, repository, collection):
        collection.replace_one.return_value = MagicMock(matched_count=0)

        with pytest.raises(NotFoundError):
            await repository.update(OID, {"name": "Ada"})

    @pytest.mark.asyncio
    async def test_update_replaces_document(self, repository, collection):
        collection.replace_one.return_value = MagicMock(matched_count=1)

        updated = await repository.update(OID, {"name": "Ada"})

        assert updated == {"id": OID, "name": "Ada"}
        collection.replace_one.assert_awaited_once_with({"_id": ObjectId(OID)}, {"name": "Ada", "_id": ObjectId(OID)})

    @pytest.mark.asyncio
    async def test_delete_not_found(self, repository, collection):
        collection.delete_one.return_value = MagicMock(deleted_count=0)

        with pytest.raises(NotFoundError):
            await repository.delete(OID)
