"""
Event definitions and emitted events.

An EventDefinition is the typed contract an action declares for each
event it may emit. The payload type is checked at emission time; the
payload schema documents the event for consumers.

Example:
    @dataclass
    class CustomerCreated:
        customer_id: str
        name: str

    created = EventDefinition.of(CustomerCreated, "customer.created", "A customer was created")
    created.validate_payload(CustomerCreated(customer_id="1", name="Ada"))
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any

from endor.errors import PayloadTypeMismatchError
from endor.schema import Schema, SchemaGenerator, get_schema_generator, type_name
from endor.utils import to_jsonable


@dataclass(frozen=True, kw_only=True, slots=True)
class EventDefinition:
    """Named, typed event contract."""

    name: str
    description: str = ""
    payload_type: type | None = None
    payload_schema: Schema | None = None

    @classmethod
    def of(
        cls,
        payload_type: type,
        name: str,
        description: str = "",
        generator: SchemaGenerator | None = None,
    ) -> EventDefinition:
        """Create a definition whose schema is generated from ``payload_type``."""
        generator = generator or get_schema_generator()
        return cls(
            name=name,
            description=description,
            payload_type=payload_type,
            payload_schema=generator.generate(payload_type),
        )

    def validate_payload(self, payload: Any) -> None:
        """
        Check that ``payload`` is exactly of the declared type.

        Raises:
            PayloadTypeMismatchError: If the runtime type differs.
        """
        if self.payload_type is None:
            return
        if type(payload) is not self.payload_type:
            raise PayloadTypeMismatchError(self.name, self.payload_type, type(payload))

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "payloadType": type_name(self.payload_type) if self.payload_type else None,
            "payloadSchema": self.payload_schema.to_dict() if self.payload_schema else None,
        }


@dataclass(frozen=True, kw_only=True, slots=True)
class Event:
    """An emitted event instance. Transient."""

    name: str
    payload: Any = None
    timestamp: int = field(default_factory=lambda: int(time.time()))
    source: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "payload": to_jsonable(self.payload),
            "timestamp": self.timestamp,
            "source": self.source,
        }
