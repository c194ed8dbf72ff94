"""
Hybrid services and the category composer.

A hybrid service declares a resource from a base model plus zero or more
categories. Each category adds typed fields (a static model or schema)
and/or dynamic attributes from a YAML fragment. HybridComposer turns the
declaration into a flat EndorService:

- root actions ``schema``, ``instance``, ``list``, ``create``, ``update``,
  ``delete`` over the base schema
- ``<category>/<verb>`` for the same six verbs over each category's
  composite schema (base, then static, then dynamic)
- custom actions from the action builder, which may not reuse a default key

Example:
    customers = (
        EndorHybridService("customers", "Customers", Customer)
        .with_categories(
            SpecializedCategory(
                id="business",
                description="Business customers",
                static_model=BusinessFields,
                additional_attributes="additionalNote: {type: string}",
            )
        )
        .with_actions(lambda schemas: {"ping": new_action(ping, "Ping", public=True)})
    )
    service = HybridComposer(RepositoryFactory()).compose(customers)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from endor.actions import ActionHandler, EndorServiceAction
from endor.errors import ActionCollisionError, RegistrationError
from endor.repository import InstanceCodec, PersistenceConfig, RepositoryFactory
from endor.schema import Schema, SchemaGenerator, get_schema_generator, merge_all, parse_fragment

from .defaults import DEFAULT_VERBS, ResourceActions
from .service import EndorService

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, kw_only=True)
class SpecializedCategory:
    """A named specialization of a hybrid resource."""

    id: str
    description: str = ""
    static_model: type | None = None
    static_model_schema: Schema | None = None
    additional_attributes: str = ""

    def static_schema(self, generator: SchemaGenerator) -> Schema | None:
        if self.static_model_schema is not None:
            return self.static_model_schema
        if self.static_model is not None:
            return generator.generate(self.static_model)
        return None

    def dynamic_schema(self) -> Schema:
        return parse_fragment(self.additional_attributes)


class SchemaAccessor:
    """Read access to composed schemas, handed to action builders."""

    def __init__(self, root: Schema, categories: Mapping[str, Schema]):
        self._root = root
        self._categories = dict(categories)

    def get_schema(self, category_id: str | None = None) -> Schema:
        if category_id is None:
            return self._root
        schema = self._categories.get(category_id)
        if schema is None:
            raise KeyError(f"Unknown category: {category_id}")
        return schema

    @property
    def category_ids(self) -> list[str]:
        return list(self._categories)


ActionBuilder = Callable[[SchemaAccessor], Mapping[str, EndorServiceAction]]


@dataclass
class EndorHybridService(Generic[T]):
    """Declarative description of a hybrid resource."""

    resource: str
    description: str
    base_model: type[T]
    categories: list[SpecializedCategory] = field(default_factory=list)
    additional_attributes: str = ""
    action_builder: ActionBuilder | None = None
    handlers: dict[str, ActionHandler] = field(default_factory=dict)
    persistence: PersistenceConfig = field(default_factory=PersistenceConfig)
    priority: int | None = None
    version: str = "v1"

    def with_categories(self, *categories: SpecializedCategory) -> EndorHybridService[T]:
        self.categories.extend(categories)
        return self

    def with_actions(self, builder: ActionBuilder) -> EndorHybridService[T]:
        self.action_builder = builder
        return self

    def with_handler(self, verb: str, handler: ActionHandler) -> EndorHybridService[T]:
        """Replace the handler of a root default action, keeping its options."""
        if verb not in DEFAULT_VERBS:
            raise RegistrationError(f"Unknown default action '{verb}'. Expected one of {list(DEFAULT_VERBS)}")
        self.handlers[verb] = handler
        return self


class HybridComposer:
    """
    Builds EndorService instances from hybrid declarations.

    Composition is deterministic: the same declaration always yields
    structurally identical schemas and the same method keys.
    """

    def __init__(
        self,
        repository_factory: RepositoryFactory | None = None,
        generator: SchemaGenerator | None = None,
    ):
        self.repository_factory = repository_factory or RepositoryFactory()
        self.generator = generator or get_schema_generator()

    def root_schema(self, hybrid: EndorHybridService[Any]) -> Schema:
        base = self.generator.generate(hybrid.base_model)
        return merge_all(base, parse_fragment(hybrid.additional_attributes))

    def category_schema(self, root: Schema, category: SpecializedCategory) -> Schema:
        return merge_all(root, category.static_schema(self.generator), category.dynamic_schema())

    def compose(self, hybrid: EndorHybridService[Any]) -> EndorService:
        """
        Raises:
            RegistrationError: Duplicate or invalid category ids.
            ActionCollisionError: A custom action reuses a default key.
            SchemaParseError: A YAML fragment is invalid.
        """
        self._check_categories(hybrid)

        root = self.root_schema(hybrid)
        category_schemas = {c.id: self.category_schema(root, c) for c in hybrid.categories}

        repository = self.repository_factory.create(
            hybrid.resource,
            InstanceCodec(hybrid.base_model, generator=self.generator),
            hybrid.persistence,
        )

        service = EndorService(
            resource=hybrid.resource,
            description=hybrid.description,
            priority=hybrid.priority,
            version=hybrid.version,
        )

        root_actions = ResourceActions(
            hybrid.resource, hybrid.description, hybrid.base_model, root, repository, generator=self.generator
        )
        service.add_actions(root_actions.actions(hybrid.handlers))

        for category in hybrid.categories:
            category_actions = ResourceActions(
                hybrid.resource,
                category.description or hybrid.description,
                hybrid.base_model,
                category_schemas[category.id],
                repository,
                category_id=category.id,
                generator=self.generator,
            )
            service.add_actions(category_actions.actions())

        if hybrid.action_builder is not None:
            custom = hybrid.action_builder(SchemaAccessor(root, category_schemas))
            for name, action in custom.items():
                if name in service:
                    raise ActionCollisionError(hybrid.resource, name)
                service.add_action(name, action)

        logger.info(
            f"Composed hybrid service '{hybrid.resource}': "
            f"{len(hybrid.categories)} categories, {len(service.methods)} actions"
        )
        return service

    def _check_categories(self, hybrid: EndorHybridService[Any]) -> None:
        seen: set[str] = set()
        for category in hybrid.categories:
            if not category.id or "/" in category.id:
                raise RegistrationError(f"Invalid category id '{category.id}' on '{hybrid.resource}'")
            if category.id in seen:
                raise RegistrationError(f"Duplicate category '{category.id}' on '{hybrid.resource}'")
            seen.add(category.id)
