"""
Endor Services

Flat services, hybrid resources with categories, the composer that turns
one into the other, and the registry that dispatches requests.
"""

from .defaults import CATEGORY_KEY, DEFAULT_VERBS, ResourceActions
from .dto import CreateDTO, ReadDTO, ReadInstanceDTO, UpdateByIdDTO
from .hybrid import (
    ActionBuilder,
    EndorHybridService,
    HybridComposer,
    SchemaAccessor,
    SpecializedCategory,
)
from .registry import ServiceRegistry
from .service import EndorService

__all__ = [
    # Services
    "EndorService",
    "EndorHybridService",
    "SpecializedCategory",
    "ActionBuilder",
    "SchemaAccessor",
    "HybridComposer",
    "ServiceRegistry",
    # Default actions
    "ResourceActions",
    "DEFAULT_VERBS",
    "CATEGORY_KEY",
    # DTOs
    "ReadInstanceDTO",
    "ReadDTO",
    "CreateDTO",
    "UpdateByIdDTO",
]
