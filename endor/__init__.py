"""
Endor - typed, schema-validated resource services.

Endor turns a model type into a documented resource service:

- **Schema Engine**: derive schema trees from dataclasses and pydantic models
- **Hybrid Resources**: a base model plus categories with static and dynamic fields
- **Action Pipeline**: validation, authorization and handlers with typed events
- **Repositories**: persistence-agnostic CRUD with in-memory and MongoDB adapters
- **OpenAPI**: one document for every registered action

Quick Start:
    >>> from endor import EndorHybridService, ServiceRegistry, SpecializedCategory
    >>>
    >>> customers = EndorHybridService("customers", "Customers", Customer).with_categories(
    ...     SpecializedCategory(id="business", static_model=BusinessFields)
    ... )
    >>> registry = ServiceRegistry(settings)
    >>> registry.register(customers)
    >>> result = await registry.dispatch(request)
"""

__version__ = "0.1.0"
__license__ = "MIT"

# Core exports for convenient imports
from endor.actions import (
    ActionRequest,
    EndorContext,
    EndorServiceAction,
    MessageGravity,
    Response,
    ResponseBuilder,
    new_action,
    new_action_with_events,
    new_configurable_action,
)
from endor.config import EndorSettings, load_settings
from endor.events import EventDefinition, InMemoryEventBus
from endor.schema import Schema, SchemaTag, generate, parse_fragment
from endor.service import (
    EndorHybridService,
    EndorService,
    ServiceRegistry,
    SpecializedCategory,
)

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Schema
    "Schema",
    "SchemaTag",
    "generate",
    "parse_fragment",
    # Actions
    "EndorServiceAction",
    "EndorContext",
    "ActionRequest",
    "Response",
    "ResponseBuilder",
    "MessageGravity",
    "new_action",
    "new_configurable_action",
    "new_action_with_events",
    # Events
    "EventDefinition",
    "InMemoryEventBus",
    # Services
    "EndorService",
    "EndorHybridService",
    "SpecializedCategory",
    "ServiceRegistry",
    # Config
    "EndorSettings",
    "load_settings",
]
