"""
Endor Resource/Repository Contract

Persistence-agnostic CRUD over resource types, with in-memory and
MongoDB adapters selected by a factory.
"""

from .base import (
    DEFAULT_LIST_TIMEOUT,
    DEFAULT_READ_TIMEOUT,
    ListOptions,
    ReadOptions,
    ResourceRepository,
)
from .codec import DocumentCodec, InstanceCodec, ModelCodec
from .factory import PersistenceConfig, RepositoryBuilder, RepositoryFactory
from .instance import ResourceInstance
from .memory import InMemoryResourceRepository
from .mongo import MongoResourceRepository

__all__ = [
    # Contract
    "ResourceRepository",
    "ReadOptions",
    "ListOptions",
    "DEFAULT_READ_TIMEOUT",
    "DEFAULT_LIST_TIMEOUT",
    # Values
    "ResourceInstance",
    "DocumentCodec",
    "ModelCodec",
    "InstanceCodec",
    # Adapters
    "InMemoryResourceRepository",
    "MongoResourceRepository",
    # Factory
    "PersistenceConfig",
    "RepositoryBuilder",
    "RepositoryFactory",
]
