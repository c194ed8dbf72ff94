"""
Conversion of framework values into JSON-compatible structures.

Anything exposing ``to_dict()`` (schemas, resource instances, envelopes,
events) renders itself; pydantic models, dataclasses, datetimes, enums
and BSON ObjectIds are handled by pydantic's encoder.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import TypeAdapter
from pydantic_core import to_jsonable_python


def to_jsonable(value: Any) -> Any:
    """Convert ``value`` to plain dicts, lists, strings and numbers."""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict) and not isinstance(value, type):
        return to_dict()
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    return to_jsonable_python(value, fallback=str, by_alias=True)


@lru_cache(maxsize=256)
def type_adapter(model: Any) -> TypeAdapter[Any]:
    """Cached pydantic TypeAdapter for ``model``."""
    return TypeAdapter(model)
