"""
Repository factory.

Selects a repository adapter from a resource's declared persistence kind.
Builders for ``memory`` and ``mongodb`` are registered by default; more
can be added with ``register``.

Example:
    factory = RepositoryFactory(settings)
    repository = factory.create(
        "customers",
        InstanceCodec(Customer),
        PersistenceConfig(kind="mongodb"),
    )
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from motor.motor_asyncio import AsyncIOMotorClient

from endor.errors import UnsupportedBackendError

from .base import ResourceRepository
from .codec import DocumentCodec
from .memory import InMemoryResourceRepository
from .mongo import MongoResourceRepository

if TYPE_CHECKING:
    from endor.config import EndorSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True, slots=True)
class PersistenceConfig:
    """Where a resource is stored."""

    kind: str = "memory"
    database: str | None = None
    collection: str | None = None
    options: dict[str, Any] = field(default_factory=dict)


RepositoryBuilder = Callable[[str, DocumentCodec[Any], PersistenceConfig], ResourceRepository[Any]]


class RepositoryFactory:
    """Registry of repository builders keyed by persistence kind."""

    def __init__(
        self,
        settings: EndorSettings | None = None,
        mongo_client: AsyncIOMotorClient | None = None,
    ):
        self._settings = settings
        self._mongo_client = mongo_client
        self._builders: dict[str, RepositoryBuilder] = {
            "memory": self._build_memory,
            "mongodb": self._build_mongo,
        }

    def register(self, kind: str, builder: RepositoryBuilder) -> None:
        self._builders[kind] = builder
        logger.info(f"Registered repository builder: {kind}")

    @property
    def kinds(self) -> list[str]:
        return sorted(self._builders)

    def create(
        self,
        resource: str,
        codec: DocumentCodec[Any],
        persistence: PersistenceConfig | None = None,
    ) -> ResourceRepository[Any]:
        """
        Build the repository for ``resource``.

        Raises:
            UnsupportedBackendError: If the persistence kind is unknown.
        """
        persistence = persistence or PersistenceConfig()
        builder = self._builders.get(persistence.kind)
        if builder is None:
            raise UnsupportedBackendError(persistence.kind, self._builders)
        logger.debug(f"Creating {persistence.kind} repository for '{resource}'")
        return builder(resource, codec, persistence)

    def _timeouts(self) -> dict[str, float]:
        if self._settings is None:
            return {}
        return {
            "read_timeout": self._settings.read_timeout_seconds,
            "list_timeout": self._settings.list_timeout_seconds,
        }

    def _build_memory(
        self, resource: str, codec: DocumentCodec[Any], persistence: PersistenceConfig
    ) -> ResourceRepository[Any]:
        return InMemoryResourceRepository(codec, **self._timeouts(), **persistence.options)

    def _build_mongo(
        self, resource: str, codec: DocumentCodec[Any], persistence: PersistenceConfig
    ) -> ResourceRepository[Any]:
        if self._mongo_client is None:
            uri = (
                self._settings.document_db_uri.get_secret_value()
                if self._settings
                else "mongodb://localhost:27017"
            )
            self._mongo_client = AsyncIOMotorClient(uri)
        database = persistence.database or (
            self._settings.document_db_name if self._settings else "endor"
        )
        collection = self._mongo_client[database][persistence.collection or resource]
        return MongoResourceRepository(collection, codec, **self._timeouts(), **persistence.options)

    def close(self) -> None:
        if self._mongo_client is not None:
            self._mongo_client.close()
            self._mongo_client = None
