"""
Action executor.

The executor drives one request through the stage machine:

    CREATED -> VALIDATING -> AUTHORIZING -> HANDLING -> COMPLETED
                   |              |             |
                   +--------------+-------------+--> FAILED

VALIDATING is skipped when the action disables payload validation. Each
stage is handled by one Middleware that returns the next stage; the
executor checks the transition, records timing and stops at a terminal
stage. Unexpected exceptions in a stage and illegal transitions fail the
request with a 500.

Example:
    executor = ActionExecutor(
        identity_provider=DevelopmentIdentityProvider(user, email),
        event_bus=InMemoryEventBus(),
        microservice_id="customers-service",
    )
    result = await executor.execute(action, ActionRequest(resource="customers", action="list"))
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from typing import Any

from endor.errors import InternalServerError, PipelineStateError
from endor.events import EventBus
from endor.observability import RequestLogger

from .action import EndorServiceAction
from .context import ActionRequest, EndorContext, Stage
from .identity import IdentityProvider
from .middleware import (
    ActionResult,
    AuthorizationMiddleware,
    HandlerMiddleware,
    Middleware,
    ValidationMiddleware,
)

logger = logging.getLogger(__name__)

TRANSITIONS: dict[Stage, frozenset[Stage]] = {
    Stage.CREATED: frozenset({Stage.VALIDATING, Stage.AUTHORIZING}),
    Stage.VALIDATING: frozenset({Stage.AUTHORIZING, Stage.FAILED}),
    Stage.AUTHORIZING: frozenset({Stage.HANDLING, Stage.FAILED}),
    Stage.HANDLING: frozenset({Stage.COMPLETED, Stage.FAILED}),
    Stage.COMPLETED: frozenset(),
    Stage.FAILED: frozenset(),
}


class ActionExecutor:
    """
    Owning dispatcher of the action pipeline.

    Args:
        middlewares: Stage handlers replacing the defaults for their stage
        identity_provider: Session resolver for the default authorization stage
        event_bus: Bus attached to every context
        microservice_id: Reported in the response header and event source
        log_type: ``JSON`` or ``TEXT`` request logging
    """

    def __init__(
        self,
        middlewares: Iterable[Middleware] | None = None,
        *,
        identity_provider: IdentityProvider | None = None,
        event_bus: EventBus | None = None,
        microservice_id: str = "",
        log_type: str = "JSON",
    ):
        self.event_bus = event_bus
        self.microservice_id = microservice_id
        self.log_type = log_type

        self._middlewares: dict[Stage, Middleware] = {
            Stage.VALIDATING: ValidationMiddleware(),
            Stage.AUTHORIZING: AuthorizationMiddleware(identity_provider),
            Stage.HANDLING: HandlerMiddleware(microservice_id),
        }
        for middleware in middlewares or ():
            self._middlewares[middleware.stage] = middleware

    @property
    def middlewares(self) -> list[Middleware]:
        return [self._middlewares[s] for s in (Stage.VALIDATING, Stage.AUTHORIZING, Stage.HANDLING)]

    def create_context(
        self,
        action: EndorServiceAction,
        request: ActionRequest,
        category_id: str | None = None,
    ) -> EndorContext[Any]:
        return EndorContext(
            microservice_id=self.microservice_id,
            request=request,
            session=request.forwarded_session(),
            category_id=category_id,
            event_bus=self.event_bus,
        )

    async def execute(
        self,
        action: EndorServiceAction,
        request: ActionRequest,
        ctx: EndorContext[Any] | None = None,
    ) -> ActionResult:
        """Run ``action`` for ``request`` and return the final result."""
        ctx = ctx or self.create_context(action, request)
        log = RequestLogger.for_request(
            execution_id=str(ctx.execution_id),
            resource=request.resource,
            action=request.action,
            log_type=self.log_type,
        )
        log.request_started(validate_payload=action.options.validate_payload, public=action.options.public)

        if action.options.validate_payload:
            self._advance(ctx, Stage.VALIDATING)
        else:
            ctx.payload = request.body
            self._advance(ctx, Stage.AUTHORIZING)

        result: ActionResult | None = None
        while not ctx.stage.is_terminal:
            middleware = self._middlewares[ctx.stage]
            start = time.perf_counter()
            try:
                outcome = await middleware.process(ctx, action)
                next_stage, stage_result = outcome.next_stage, outcome.result
            except Exception as e:
                logger.error(
                    f"[{ctx.execution_id}] {middleware.name} failed: {e}",
                    exc_info=True,
                )
                next_stage, stage_result = Stage.FAILED, ActionResult.from_error(
                    InternalServerError(f"Internal error: {e}")
                )

            duration_ms = (time.perf_counter() - start) * 1000
            ctx.record_timing(middleware.name, duration_ms)
            log.stage_completed(ctx.stage.value, duration_ms, next_stage.value)

            if ctx.stage == Stage.AUTHORIZING and next_stage == Stage.HANDLING:
                log.bind_session(ctx.session.id, ctx.session.user)

            try:
                self._advance(ctx, next_stage)
            except PipelineStateError as e:
                logger.error(f"[{ctx.execution_id}] {middleware.name}: {e.message}")
                self._advance(ctx, Stage.FAILED)
                stage_result = ActionResult.from_error(e)
            if stage_result is not None:
                result = stage_result

        if result is None:
            result = ActionResult.from_error(
                InternalServerError(f"Pipeline ended in {ctx.stage.value} without a result")
            )

        if result.success:
            log.request_completed(result.status_code, ctx.elapsed_ms)
        else:
            log.request_failed(
                result.status_code,
                [m.value for m in result.response.messages],
                ctx.elapsed_ms,
            )
        log.request_audit(ctx.to_audit_dict())
        return result

    def _advance(self, ctx: EndorContext[Any], stage: Stage) -> None:
        if stage not in TRANSITIONS[ctx.stage]:
            raise PipelineStateError(
                f"Illegal stage transition {ctx.stage.value} -> {stage.value}"
            )
        ctx.stage_history.append(ctx.stage)
        ctx.stage = stage
