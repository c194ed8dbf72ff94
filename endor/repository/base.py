"""
Resource repository contract.

A ResourceRepository is the persistence-agnostic CRUD interface every
storage adapter implements. Adapters bound each operation with their own
deadline (5s for point operations, 10s for list scans by default) and
raise RepositoryTimeoutError when it expires.

Error contract:
- instance(): NotFoundError when the id does not exist
- create(): ConflictError on identity collision
- update()/delete(): NotFoundError when nothing matched
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from endor.errors import RepositoryTimeoutError

from .codec import DocumentCodec

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

DEFAULT_READ_TIMEOUT = 5.0
DEFAULT_LIST_TIMEOUT = 10.0


@dataclass(frozen=True, kw_only=True, slots=True)
class ReadOptions:
    projection: Mapping[str, Any] | None = None


@dataclass(frozen=True, kw_only=True, slots=True)
class ListOptions:
    """Filter, projection and ordering for list scans."""

    filter: Mapping[str, Any] = field(default_factory=dict)
    projection: Mapping[str, Any] | None = None
    sort: list[tuple[str, int]] | None = None
    limit: int | None = None


class ResourceRepository(ABC, Generic[T]):
    """
    CRUD contract over a resource element type.

    Subclasses implement the ``_instance``/``_list``/... coroutines; the
    public methods wrap them in the adapter's deadlines.
    """

    def __init__(
        self,
        codec: DocumentCodec[T],
        *,
        auto_generate_id: bool = True,
        read_timeout: float = DEFAULT_READ_TIMEOUT,
        list_timeout: float = DEFAULT_LIST_TIMEOUT,
    ):
        self.codec = codec
        self.auto_generate_id = auto_generate_id
        self.read_timeout = read_timeout
        self.list_timeout = list_timeout

    async def instance(self, id: str, options: ReadOptions | None = None) -> T:
        return await self._bounded(self._instance(id, options or ReadOptions()), self.read_timeout, "instance")

    async def list(self, options: ListOptions | None = None) -> list[T]:
        return await self._bounded(self._list(options or ListOptions()), self.list_timeout, "list")

    async def create(self, value: T) -> T:
        return await self._bounded(self._create(value), self.read_timeout, "create")

    async def update(self, id: str, value: T) -> T:
        return await self._bounded(self._update(id, value), self.read_timeout, "update")

    async def delete(self, id: str) -> None:
        await self._bounded(self._delete(id), self.read_timeout, "delete")

    @abstractmethod
    async def _instance(self, id: str, options: ReadOptions) -> T:
        ...

    @abstractmethod
    async def _list(self, options: ListOptions) -> list[T]:
        ...

    @abstractmethod
    async def _create(self, value: T) -> T:
        ...

    @abstractmethod
    async def _update(self, id: str, value: T) -> T:
        ...

    @abstractmethod
    async def _delete(self, id: str) -> None:
        ...

    async def _bounded(self, operation: Awaitable[R], timeout: float, name: str) -> R:
        try:
            return await asyncio.wait_for(operation, timeout)
        except asyncio.TimeoutError as e:
            logger.warning(f"Repository {type(self).__name__}.{name} exceeded {timeout}s")
            raise RepositoryTimeoutError(name, timeout) from e
