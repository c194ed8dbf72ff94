"""
Payload types of the default resource actions.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ReadInstanceDTO(BaseModel):
    id: str = Field(description="Resource identifier")


class ReadDTO(BaseModel):
    filter: dict[str, Any] = Field(default_factory=dict)
    projection: dict[str, Any] | None = None


class CreateDTO(BaseModel, Generic[T]):
    data: T


class UpdateByIdDTO(BaseModel, Generic[T]):
    id: str
    data: T
