"""
Pipeline stages.

Each Middleware owns one Stage. It inspects or updates the context and
returns a StageOutcome naming the next stage; a failing stage returns
``Stage.FAILED`` with the result to send back, which ends the request.

Custom stages replace the default for their stage:

    class ApiKeyAuthorization(Middleware):
        stage = Stage.AUTHORIZING

        async def process(self, ctx, action):
            ...
            return StageOutcome(Stage.HANDLING)

    executor = ActionExecutor(middlewares=[ApiKeyAuthorization()])
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from jsonschema import Draft202012Validator
from pydantic import ValidationError as PydanticValidationError

from endor.errors import EndorError, InternalServerError, ValidationError
from endor.schema import schema_validator, validate_value
from endor.utils import type_adapter

from .action import EndorServiceAction, NoPayload
from .context import EndorContext, Stage
from .identity import IdentityProvider
from .response import Response

logger = logging.getLogger(__name__)

MICROSERVICE_HEADER = "x-endor-microservice"


@dataclass
class ActionResult:
    """Final status and envelope of one request."""

    status_code: int
    response: Response[Any]
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return 200 <= self.status_code < 300

    @classmethod
    def from_error(cls, error: EndorError) -> ActionResult:
        return cls(status_code=error.status_code, response=Response.failure(*error.messages))

    def to_dict(self) -> dict[str, Any]:
        return self.response.to_dict()


@dataclass(frozen=True)
class StageOutcome:
    next_stage: Stage
    result: ActionResult | None = None

    @classmethod
    def fail(cls, error: EndorError) -> StageOutcome:
        return cls(Stage.FAILED, ActionResult.from_error(error))


class Middleware(ABC):
    """One stage of the action pipeline."""

    stage: Stage

    @property
    def name(self) -> str:
        return self.__class__.__name__

    @abstractmethod
    async def process(self, ctx: EndorContext[Any], action: EndorServiceAction) -> StageOutcome:
        ...


# =============================================================================
# Default Stages
# =============================================================================


class ValidationMiddleware(Middleware):
    """
    Binds the request body to the action's payload type.

    The body is first checked against the action's input schema with a
    JSON-schema validator, then validated with pydantic into ``payload_type``.
    """

    stage = Stage.VALIDATING

    def __init__(self):
        self._validators: dict[int, tuple[EndorServiceAction, Draft202012Validator]] = {}

    def validator_for(self, action: EndorServiceAction) -> Draft202012Validator:
        cached = self._validators.get(id(action))
        if cached is None or cached[0] is not action:
            cached = self._validators[id(action)] = (action, schema_validator(action.input_schema))
        return cached[1]

    async def process(self, ctx: EndorContext[Any], action: EndorServiceAction) -> StageOutcome:
        if action.payload_type is NoPayload:
            ctx.payload = NoPayload()
            return StageOutcome(Stage.AUTHORIZING)

        body = ctx.request.body if ctx.request else None
        raw = {} if body is None else body

        if action.input_schema is not None:
            errors = validate_value(self.validator_for(action), raw)
            if errors:
                return StageOutcome.fail(ValidationError("Invalid payload", messages=errors))

        try:
            ctx.payload = type_adapter(action.payload_type).validate_python(raw)
        except PydanticValidationError as e:
            messages = [
                f"{'.'.join(str(p) for p in err['loc']) or 'payload'}: {err['msg']}"
                for err in e.errors()
            ]
            return StageOutcome.fail(ValidationError("Invalid payload", messages=messages))

        return StageOutcome(Stage.AUTHORIZING)


class AuthorizationMiddleware(Middleware):
    """Resolves the session unless the action is public."""

    stage = Stage.AUTHORIZING

    def __init__(self, identity_provider: IdentityProvider | None):
        self.identity_provider = identity_provider

    async def process(self, ctx: EndorContext[Any], action: EndorServiceAction) -> StageOutcome:
        if action.options.public:
            return StageOutcome(Stage.HANDLING)

        if self.identity_provider is None:
            return StageOutcome.fail(InternalServerError("No identity provider configured"))

        try:
            ctx.session = await self.identity_provider.resolve_session(ctx)
        except EndorError as e:
            return StageOutcome.fail(e)

        return StageOutcome(Stage.HANDLING)


class HandlerMiddleware(Middleware):
    """Runs the action handler with the validated payload and session."""

    stage = Stage.HANDLING

    def __init__(self, microservice_id: str = ""):
        self.microservice_id = microservice_id

    async def process(self, ctx: EndorContext[Any], action: EndorServiceAction) -> StageOutcome:
        ctx.available_events = action.events
        try:
            response = await action.invoke(ctx)
        except EndorError as e:
            logger.info(f"[{ctx.execution_id}] Handler returned {type(e).__name__}: {e.message}")
            return StageOutcome.fail(e)

        if response is None:
            response = Response()
        return StageOutcome(
            Stage.COMPLETED,
            ActionResult(
                status_code=200,
                response=response,
                headers={MICROSERVICE_HEADER: self.microservice_id},
            ),
        )
