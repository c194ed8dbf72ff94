"""
Service actions.

An EndorServiceAction pairs a handler with its payload type and options.
Actions are immutable once created; registering one on a service never
changes it.

Example:
    async def get_customer(ctx: EndorContext[ReadInstanceDTO]) -> Response:
        ...

    action = new_action(get_customer, "Get a customer", payload_type=ReadInstanceDTO)

    # with events
    action = new_action_with_events(
        create_customer,
        "Create a customer",
        EventDefinition.of(CustomerCreated, "customer.created"),
        payload_type=CreateCustomer,
    )
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from typing import Any

from endor.errors import RegistrationError
from endor.events import EventDefinition
from endor.schema import Schema, SchemaGenerator, get_schema_generator

from .context import EndorContext
from .response import Response

logger = logging.getLogger(__name__)

ActionHandler = Callable[[EndorContext[Any]], Awaitable[Response[Any]] | Response[Any]]


@dataclass(frozen=True)
class NoPayload:
    """Payload type of actions that take no input."""


@dataclass(frozen=True, kw_only=True)
class ActionOptions:
    description: str = ""
    public: bool = False
    validate_payload: bool = True
    input_schema: Schema | None = None
    events: tuple[EventDefinition, ...] = ()


class EndorServiceAction:
    """A handler with its payload type and options."""

    def __init__(
        self,
        handler: ActionHandler,
        options: ActionOptions | None = None,
        payload_type: Any = NoPayload,
        generator: SchemaGenerator | None = None,
    ):
        options = options or ActionOptions()

        names = [e.name for e in options.events]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise RegistrationError(f"Duplicate event definitions: {duplicates}")

        if options.input_schema is None and payload_type is not NoPayload:
            generator = generator or get_schema_generator()
            options = replace(options, input_schema=generator.generate(payload_type))

        self._handler = handler
        self._options = options
        self._payload_type = payload_type
        self._events = {e.name: e for e in options.events}

    @property
    def handler(self) -> ActionHandler:
        return self._handler

    @property
    def options(self) -> ActionOptions:
        return self._options

    @property
    def payload_type(self) -> Any:
        return self._payload_type

    @property
    def description(self) -> str:
        return self._options.description

    @property
    def input_schema(self) -> Schema | None:
        return self._options.input_schema

    @property
    def events(self) -> dict[str, EventDefinition]:
        return dict(self._events)

    def get_event(self, name: str) -> EventDefinition | None:
        return self._events.get(name)

    def with_handler(self, handler: ActionHandler) -> EndorServiceAction:
        """Copy of this action with another handler and the same options."""
        return EndorServiceAction(handler, self._options, self._payload_type)

    def with_events(self, *events: EventDefinition) -> EndorServiceAction:
        """Copy of this action declaring additional events."""
        options = replace(self._options, events=self._options.events + tuple(events))
        return EndorServiceAction(self._handler, options, self._payload_type)

    async def invoke(self, ctx: EndorContext[Any]) -> Response[Any]:
        result = self._handler(ctx)
        if inspect.isawaitable(result):
            result = await result
        return result

    def __repr__(self) -> str:
        return f"EndorServiceAction(description={self.description!r}, public={self._options.public})"


def new_action(
    handler: ActionHandler,
    description: str,
    payload_type: Any = NoPayload,
    *,
    public: bool = False,
) -> EndorServiceAction:
    """Action with default options and a schema generated from ``payload_type``."""
    return EndorServiceAction(
        handler,
        ActionOptions(description=description, public=public),
        payload_type,
    )


def new_configurable_action(
    options: ActionOptions,
    handler: ActionHandler,
    payload_type: Any = NoPayload,
) -> EndorServiceAction:
    return EndorServiceAction(handler, options, payload_type)


def new_action_with_events(
    handler: ActionHandler,
    description: str,
    *events: EventDefinition,
    payload_type: Any = NoPayload,
    public: bool = False,
) -> EndorServiceAction:
    return EndorServiceAction(
        handler,
        ActionOptions(description=description, public=public, events=tuple(events)),
        payload_type,
    )
