"""
Tests for event definitions, the in-memory bus and context emission.
"""

from dataclasses import dataclass

import pytest

from endor.actions import EndorContext
from endor.errors import NoEventBusError, PayloadTypeMismatchError, UndeclaredEventError
from endor.events import Event, EventBus, EventDefinition, InMemoryEventBus
from endor.schema import SchemaType

# =============================================================================
# Test Payloads
# =============================================================================


@dataclass
class CustomerCreated:
    customer_id: str
    name: str


@dataclass
class SpecialCustomerCreated(CustomerCreated):
    tier: str = "gold"


CREATED = EventDefinition.of(CustomerCreated, "customer.created", "A customer was created")


# =============================================================================
# Definitions
# =============================================================================


class TestEventDefinition:
    """Tests for EventDefinition."""

    def test_schema_is_generated(self):
        assert CREATED.payload_schema.type == SchemaType.OBJECT
        assert CREATED.payload_schema.property_names == ["customer_id", "name"]

    def test_exact_type_accepted(self):
        CREATED.validate_payload(CustomerCreated(customer_id="1", name="Ada"))

    def test_other_type_rejected(self):
        with pytest.raises(PayloadTypeMismatchError):
            CREATED.validate_payload({"customer_id": "1", "name": "Ada"})

    def test_subclass_rejected(self):
        with pytest.raises(PayloadTypeMismatchError):
            CREATED.validate_payload(SpecialCustomerCreated(customer_id="1", name="Ada"))

    def test_to_dict(self):
        data = CREATED.to_dict()

        assert data["name"] == "customer.created"
        assert data["payloadType"] == "CustomerCreated"
        assert data["payloadSchema"]["type"] == "object"

    def test_event_to_dict(self):
        event = Event(name="customer.created", payload=CustomerCreated("1", "Ada"), source="svc")

        assert event.to_dict()["payload"] == {"customer_id": "1", "name": "Ada"}
        assert event.timestamp > 0


# =============================================================================
# Bus
# =============================================================================


class TestInMemoryEventBus:
    """Tests for InMemoryEventBus."""

    def test_satisfies_protocol(self):
        assert isinstance(InMemoryEventBus(), EventBus)

    @pytest.mark.asyncio
    async def test_publish_reaches_subscribers(self):
        bus = InMemoryEventBus()
        received = []

        async def on_created(event):
            received.append(event.payload)

        bus.subscribe("customer.created", on_created)
        await bus.publish(Event(name="customer.created", payload="p"))
        await bus.drain()

        assert received == ["p"]

    @pytest.mark.asyncio
    async def test_sync_handlers_run(self):
        bus = InMemoryEventBus()
        received = []

        bus.subscribe("customer.created", lambda event: received.append(event.name))
        await bus.publish(Event(name="customer.created"))
        await bus.drain()

        assert received == ["customer.created"]

    @pytest.mark.asyncio
    async def test_no_subscribers(self):
        bus = InMemoryEventBus()

        await bus.publish(Event(name="nobody.listens"))

        assert bus.pending == 0
        assert [e.name for e in bus.history] == ["nobody.listens"]

    @pytest.mark.asyncio
    async def test_failing_handler_is_isolated(self):
        bus = InMemoryEventBus()
        received = []

        async def broken(event):
            raise RuntimeError("boom")

        async def healthy(event):
            received.append(event.name)

        bus.subscribe("customer.created", broken)
        bus.subscribe("customer.created", healthy)

        await bus.publish(Event(name="customer.created"))
        await bus.drain()

        assert received == ["customer.created"]
        assert bus.pending == 0

    @pytest.mark.asyncio
    async def test_unsubscribe(self):
        bus = InMemoryEventBus()
        received = []

        async def handler(event):
            received.append(event)

        bus.subscribe("a", handler)
        assert bus.unsubscribe("a", handler) is True
        assert bus.unsubscribe("a", handler) is False

        await bus.publish(Event(name="a"))
        await bus.drain()

        assert received == []


# =============================================================================
# Context Emission
# =============================================================================


class TestEmitEvent:
    """Tests for EndorContext.emit_event."""

    def _context(self, bus=None):
        return EndorContext(
            microservice_id="customers-service",
            event_bus=bus,
            available_events={CREATED.name: CREATED},
        )

    @pytest.mark.asyncio
    async def test_emit_declared_event(self):
        bus = InMemoryEventBus()
        ctx = self._context(bus)

        await ctx.emit_event("customer.created", CustomerCreated("1", "Ada"))

        assert [e.name for e in ctx.emitted_events] == ["customer.created"]
        assert bus.history[0].source == "customers-service"

    @pytest.mark.asyncio
    async def test_undeclared_event(self):
        ctx = self._context(InMemoryEventBus())

        with pytest.raises(UndeclaredEventError):
            await ctx.emit_event("customer.deleted", CustomerCreated("1", "Ada"))

    @pytest.mark.asyncio
    async def test_payload_mismatch(self):
        ctx = self._context(InMemoryEventBus())

        with pytest.raises(PayloadTypeMismatchError):
            await ctx.emit_event("customer.created", {"customer_id": "1"})

        assert ctx.emitted_events == []

    @pytest.mark.asyncio
    async def test_no_bus(self):
        ctx = self._context(bus=None)

        with pytest.raises(NoEventBusError):
            await ctx.emit_event("customer.created", CustomerCreated("1", "Ada"))

    def test_errors_are_distinct(self):
        assert not issubclass(UndeclaredEventError, PayloadTypeMismatchError)
        assert not issubclass(NoEventBusError, PayloadTypeMismatchError)
        assert not issubclass(NoEventBusError, UndeclaredEventError)
