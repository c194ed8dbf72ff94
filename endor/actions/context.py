"""
Request-scoped action context.

EndorContext carries everything a handler sees for one request: the
resolved session, the validated payload, the originating request and the
events the current action may emit. It is created by the executor,
advanced through the pipeline stages and discarded when the request ends.

Example:
    async def create_customer(ctx: EndorContext[CreateCustomer]) -> Response:
        customer = await repository.create(ctx.payload.to_model())
        await ctx.emit_event("customer.created", CustomerCreated(id=customer.id))
        return ResponseBuilder().add_data(customer).build()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Generic, TypeVar
from uuid import UUID, uuid4

from pydantic import BaseModel

from endor.errors import NoEventBusError, UndeclaredEventError
from endor.events import Event, EventBus, EventDefinition

logger = logging.getLogger(__name__)

P = TypeVar("P")


def _utc_now() -> datetime:
    return datetime.now(UTC)


class Session(BaseModel):
    """Authenticated session returned by the identity service."""

    id: str = ""
    user: str = ""
    email: str = ""
    app: str = ""
    development: bool = False


class Stage(str, Enum):
    """Pipeline stages of one request."""

    CREATED = "created"
    VALIDATING = "validating"
    AUTHORIZING = "authorizing"
    HANDLING = "handling"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (Stage.COMPLETED, Stage.FAILED)


@dataclass(kw_only=True)
class ActionRequest:
    """Transport-neutral description of an inbound action call."""

    resource: str
    action: str
    app: str = ""
    version: str | None = None
    path: str = ""
    body: Any = None
    cookies: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)

    def header(self, name: str, default: str = "") -> str:
        name = name.lower()
        for key, value in self.headers.items():
            if key.lower() == name:
                return value
        return default

    def forwarded_session(self) -> Session:
        """Session fields forwarded by a gateway in request headers."""
        return Session(
            id=self.header("x-user-session"),
            user=self.header("x-user-id"),
            app=self.app,
            development=self.header("x-development").lower() == "true",
        )


@dataclass(kw_only=True)
class EndorContext(Generic[P]):
    """State of one action request."""

    microservice_id: str = ""
    request: ActionRequest | None = None
    session: Session = field(default_factory=Session)
    payload: P | None = None
    category_id: str | None = None

    event_bus: EventBus | None = None
    available_events: dict[str, EventDefinition] = field(default_factory=dict)
    emitted_events: list[Event] = field(default_factory=list)

    execution_id: UUID = field(default_factory=uuid4)
    started_at: datetime = field(default_factory=_utc_now)
    stage: Stage = Stage.CREATED
    stage_history: list[Stage] = field(default_factory=list)
    stage_timings: dict[str, float] = field(default_factory=dict)

    @property
    def elapsed_ms(self) -> float:
        return (_utc_now() - self.started_at).total_seconds() * 1000

    @property
    def resource(self) -> str:
        return self.request.resource if self.request else ""

    @property
    def action(self) -> str:
        return self.request.action if self.request else ""

    def record_timing(self, stage: str, duration_ms: float) -> None:
        self.stage_timings[stage] = duration_ms

    async def emit_event(self, name: str, payload: Any) -> None:
        """
        Publish a declared event. Returns without waiting for subscribers.

        Raises:
            UndeclaredEventError: ``name`` is not declared by the current action.
            PayloadTypeMismatchError: ``payload`` is not of the declared type.
            NoEventBusError: No bus is attached to this context.
        """
        definition = self.available_events.get(name)
        if definition is None:
            raise UndeclaredEventError(name, self.available_events)
        definition.validate_payload(payload)
        if self.event_bus is None:
            raise NoEventBusError(name)

        event = Event(name=name, payload=payload, source=self.microservice_id)
        await self.event_bus.publish(event)
        self.emitted_events.append(event)
        logger.debug(f"[{self.execution_id}] Emitted event '{name}'")

    def to_audit_dict(self) -> dict[str, Any]:
        return {
            "execution_id": str(self.execution_id),
            "started_at": self.started_at.isoformat(),
            "resource": self.resource,
            "action": self.action,
            "category_id": self.category_id,
            "session_id": self.session.id,
            "user_id": self.session.user,
            "stage": self.stage.value,
            "stage_history": [s.value for s in self.stage_history],
            "stage_timings": self.stage_timings,
            "events": [e.name for e in self.emitted_events],
        }
