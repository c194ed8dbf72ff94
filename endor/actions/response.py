"""
Response envelope.

Every action returns a Response: a list of messages, the data and
optionally the schema describing it.

Example:
    return (
        ResponseBuilder()
        .add_data(instance)
        .add_schema(schema)
        .add_message(MessageGravity.INFO, "customers created")
        .build()
    )
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

from endor.schema import Schema
from endor.utils import to_jsonable

R = TypeVar("R")


class MessageGravity(str, Enum):
    INFO = "Info"
    WARNING = "Warning"
    ERROR = "Error"
    FATAL = "Fatal"


@dataclass(frozen=True, slots=True)
class ResponseMessage:
    gravity: MessageGravity
    value: str

    def to_dict(self) -> dict[str, str]:
        return {"gravity": self.gravity.value, "value": self.value}


@dataclass
class Response(Generic[R]):
    """Envelope returned by actions and by the pipeline on failure."""

    messages: list[ResponseMessage] = field(default_factory=list)
    data: R | None = None
    schema: Schema | None = None

    @classmethod
    def failure(cls, *messages: str) -> Response[Any]:
        return cls(messages=[ResponseMessage(MessageGravity.FATAL, m) for m in messages])

    def to_dict(self) -> dict[str, Any]:
        return {
            "messages": [m.to_dict() for m in self.messages],
            "data": to_jsonable(self.data),
            "schema": self.schema.to_dict() if self.schema is not None else None,
        }


class ResponseBuilder(Generic[R]):
    """Fluent construction of a Response."""

    def __init__(self) -> None:
        self._messages: list[ResponseMessage] = []
        self._data: R | None = None
        self._schema: Schema | None = None

    def add_message(self, gravity: MessageGravity, value: str) -> ResponseBuilder[R]:
        self._messages.append(ResponseMessage(gravity, value))
        return self

    def add_data(self, data: R) -> ResponseBuilder[R]:
        self._data = data
        return self

    def add_schema(self, schema: Schema | None) -> ResponseBuilder[R]:
        self._schema = schema
        return self

    def build(self) -> Response[R]:
        return Response(messages=list(self._messages), data=self._data, schema=self._schema)
