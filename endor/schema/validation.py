"""
Validation of decoded JSON values against a Schema.

The schema's wire form is checked with a draft 2020-12 validator. Unknown
object properties are allowed since hybrid resources carry free-form
metadata next to their declared fields, and a property set to ``null``
counts as absent.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from jsonschema import Draft202012Validator

from .base import Schema


def schema_validator(schema: Schema) -> Draft202012Validator:
    return Draft202012Validator(schema.to_dict())


def validate_value(schema: Schema | Draft202012Validator, value: Any) -> list[str]:
    """
    Check ``value`` against ``schema``.

    Returns:
        One ``"<path>: <message>"`` string per problem, empty when the
        value conforms.
    """
    validator = schema if isinstance(schema, Draft202012Validator) else schema_validator(schema)
    messages = [
        f"{format_path(error.absolute_path)}: {error.message}"
        for error in validator.iter_errors(_drop_nulls(value))
    ]
    return sorted(messages)


def format_path(path: Iterable[Any]) -> str:
    where = ""
    for part in path:
        if isinstance(part, int):
            where += f"[{part}]"
        else:
            where = f"{where}.{part}" if where else str(part)
    return where or "payload"


def _drop_nulls(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _drop_nulls(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_drop_nulls(v) for v in value]
    return value
