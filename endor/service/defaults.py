"""
Default resource actions.

Every hybrid resource, and every one of its categories, gets the same six
actions over its repository: ``schema``, ``instance``, ``list``,
``create``, ``update`` and ``delete``. Category actions stamp the
category id into the instance metadata on write and only see instances
of their own category on read. Updates keep the category an instance was
created in.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from endor.actions import (
    ActionHandler,
    ActionOptions,
    EndorContext,
    EndorServiceAction,
    MessageGravity,
    NoPayload,
    Response,
    ResponseBuilder,
)
from endor.errors import NotFoundError, ValidationError
from endor.repository import ListOptions, ResourceInstance, ResourceRepository
from endor.schema import Schema, SchemaGenerator, get_schema_generator

from .dto import CreateDTO, ReadDTO, ReadInstanceDTO, UpdateByIdDTO

logger = logging.getLogger(__name__)

CATEGORY_KEY = "category"

DEFAULT_VERBS = ("schema", "instance", "list", "create", "update", "delete")

_DESCRIPTIONS = {
    "schema": "Get the schema of the {resource} ({description})",
    "instance": "Get the specified instance of {resource} ({description})",
    "list": "Search for available list of {resource} ({description})",
    "create": "Create the instance of {resource} ({description})",
    "update": "Update the existing instance of {resource} ({description})",
    "delete": "Delete the existing instance of {resource} ({description})",
}


class ResourceActions:
    """
    The default actions of one resource or category.

    Args:
        resource: Resource name
        description: Resource (or category) description
        base_model: Model type of the instances' declared fields
        schema: Composite schema of the instances
        repository: Repository of ResourceInstance values
        category_id: Category the actions are scoped to, if any
        generator: Schema generator used for payload schemas
    """

    def __init__(
        self,
        resource: str,
        description: str,
        base_model: type,
        schema: Schema,
        repository: ResourceRepository[ResourceInstance[Any]],
        category_id: str | None = None,
        generator: SchemaGenerator | None = None,
    ):
        self.resource = resource
        self.description = description
        self.base_model = base_model
        self.schema = schema
        self.repository = repository
        self.category_id = category_id
        self.generator = generator or get_schema_generator()

    def key(self, verb: str) -> str:
        return f"{self.category_id}/{verb}" if self.category_id else verb

    def describe(self, verb: str) -> str:
        text = _DESCRIPTIONS[verb].format(resource=self.resource, description=self.description)
        if self.category_id:
            text += f" for category {self.category_id}"
        return text

    def actions(self, overrides: Mapping[str, ActionHandler] | None = None) -> dict[str, EndorServiceAction]:
        """Method key to action for all six verbs."""
        overrides = overrides or {}
        handlers: dict[str, ActionHandler] = {
            "schema": self.get_schema,
            "instance": self.get_instance,
            "list": self.list_instances,
            "create": self.create_instance,
            "update": self.update_instance,
            "delete": self.delete_instance,
        }
        data_schema = self.schema.evolve(name=None)
        input_schemas: dict[str, Schema | None] = {
            "schema": None,
            "instance": self.generator.generate(ReadInstanceDTO),
            "list": self.generator.generate(ReadDTO),
            "create": Schema.object({"data": data_schema}, required=["data"]),
            "update": Schema.object(
                {"id": Schema.string(), "data": data_schema},
                required=["id", "data"],
            ),
            "delete": self.generator.generate(ReadInstanceDTO),
        }
        payload_types: dict[str, Any] = {
            "schema": NoPayload,
            "instance": ReadInstanceDTO,
            "list": ReadDTO,
            "create": CreateDTO[dict[str, Any]],
            "update": UpdateByIdDTO[dict[str, Any]],
            "delete": ReadInstanceDTO,
        }

        result = {}
        for verb in DEFAULT_VERBS:
            options = ActionOptions(
                description=self.describe(verb),
                input_schema=input_schemas[verb],
            )
            handler = overrides.get(verb, handlers[verb])
            result[self.key(verb)] = EndorServiceAction(handler, options, payload_types[verb])
        return result

    # -------------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------------

    async def get_schema(self, ctx: EndorContext[NoPayload]) -> Response[Any]:
        return ResponseBuilder().add_schema(self.schema).build()

    async def get_instance(self, ctx: EndorContext[ReadInstanceDTO]) -> Response[Any]:
        instance = await self._load(ctx.payload.id)
        return ResponseBuilder().add_data(instance).add_schema(self.schema).build()

    async def list_instances(self, ctx: EndorContext[ReadDTO]) -> Response[Any]:
        query: dict[str, Any] = dict(ctx.payload.filter)
        if self.category_id:
            scope = {CATEGORY_KEY: self.category_id}
            query = {"$and": [query, scope]} if query else scope

        instances = await self.repository.list(
            ListOptions(filter=query, projection=ctx.payload.projection)
        )
        return ResponseBuilder().add_data(instances).add_schema(self.schema).build()

    async def create_instance(self, ctx: EndorContext[CreateDTO[dict[str, Any]]]) -> Response[Any]:
        instance = self._to_instance(ctx.payload.data)
        created = await self.repository.create(instance)
        logger.info(f"Created {self.resource} {created.id} (category={self.category_id})")
        return (
            ResponseBuilder()
            .add_data(created)
            .add_schema(self.schema)
            .add_message(MessageGravity.INFO, f"{self.resource} created")
            .build()
        )

    async def update_instance(self, ctx: EndorContext[UpdateByIdDTO[dict[str, Any]]]) -> Response[Any]:
        stored = await self._load(ctx.payload.id)
        instance = self._to_instance(ctx.payload.data)
        category = stored.metadata.get(CATEGORY_KEY)
        if category is not None:
            instance.metadata[CATEGORY_KEY] = category
        updated = await self.repository.update(ctx.payload.id, instance)
        return (
            ResponseBuilder()
            .add_data(updated)
            .add_schema(self.schema)
            .add_message(MessageGravity.INFO, f"{self.resource} updated")
            .build()
        )

    async def delete_instance(self, ctx: EndorContext[ReadInstanceDTO]) -> Response[Any]:
        if self.category_id:
            await self._load(ctx.payload.id)
        await self.repository.delete(ctx.payload.id)
        return (
            ResponseBuilder()
            .add_message(MessageGravity.INFO, f"{self.resource} deleted")
            .build()
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def _load(self, id: str) -> ResourceInstance[Any]:
        instance = await self.repository.instance(id)
        if self.category_id and instance.metadata.get(CATEGORY_KEY) != self.category_id:
            raise NotFoundError(f"{self.resource} {id} not found in category {self.category_id}")
        return instance

    def _to_instance(self, data: Mapping[str, Any]) -> ResourceInstance[Any]:
        try:
            instance = ResourceInstance.from_dict(self.base_model, data, self.generator)
        except PydanticValidationError as e:
            messages = [
                f"data.{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            ]
            raise ValidationError("Invalid resource data", messages=messages) from e
        if self.category_id:
            instance.metadata[CATEGORY_KEY] = self.category_id
        return instance
